from fastapi import APIRouter, Depends, Header, Query, status
from typing import Optional, List

from roadside.api.dependencies import get_estimators, get_service_repository
from roadside.core.auth_utils import check_ownership, check_status_change_allowed
from roadside.core.enums import ServiceStatus, ServiceType, UserRole
from roadside.core.rate_limit import check_rate_limit
from roadside.core.response_builders import build_service_response
from roadside.core.security import get_current_user, require_provider
from roadside.schemas.service_request import ServiceRequestCreate, ServiceRequestOut, ServiceStatusUpdate
from roadside.services import service_requests
from roadside.services.webhook import send_webhook, status_change_payload
from roadside.utils.idempotency import get_idempotent, set_idempotent

router = APIRouter(prefix="/services", tags=["services"])


@router.post("/", response_model=ServiceRequestOut, status_code=status.HTTP_201_CREATED)
async def create_service(
    payload: ServiceRequestCreate,
    idempotency_key: Optional[str] = Header(None),
    repository=Depends(get_service_repository),
    estimators=Depends(get_estimators),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(current_user.id)

    if idempotency_key:
        prev = await get_idempotent(current_user.id, idempotency_key)
        if prev:
            return prev

    record = await service_requests.create_service(repository, estimators, current_user.id, payload)

    out = build_service_response(record)
    if idempotency_key:
        await set_idempotent(current_user.id, idempotency_key, out.model_dump(mode="json"))
    return out


@router.get("/", response_model=List[ServiceRequestOut])
async def list_services(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    repository=Depends(get_service_repository),
    current_user=Depends(get_current_user)
):
    return await service_requests.get_user_services(repository, current_user.id, limit=limit, offset=offset)


@router.get("/nearby", response_model=List[ServiceRequestOut])
async def nearby_services(
    longitude: float = Query(...),
    latitude: float = Query(...),
    max_distance: float = Query(5000.0, description="Radius in meters"),
    service_type: Optional[ServiceType] = Query(None, alias="type"),
    repository=Depends(get_service_repository),
    estimators=Depends(get_estimators),
    current_user=Depends(require_provider)
):
    return await service_requests.get_nearby_services(
        repository,
        estimators,
        longitude,
        latitude,
        max_distance,
        service_type.value if service_type else None,
    )


@router.get("/{service_id}", response_model=ServiceRequestOut)
async def get_service(
    service_id: int,
    repository=Depends(get_service_repository),
    estimators=Depends(get_estimators),
    current_user=Depends(get_current_user)
):
    record = await service_requests.get_service(repository, service_id)
    check_ownership(record.user_id, current_user, "Service request")

    return await service_requests.describe_service(estimators, record)


@router.put("/{service_id}/status", response_model=ServiceRequestOut)
async def update_service_status(
    service_id: int,
    payload: ServiceStatusUpdate,
    repository=Depends(get_service_repository),
    estimators=Depends(get_estimators),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(current_user.id)

    record = await service_requests.get_service(repository, service_id)
    check_ownership(record.user_id, current_user, "Service request")
    check_status_change_allowed(payload.status, current_user)

    provider_id = payload.service_provider_id
    if (
        provider_id is None
        and payload.status == ServiceStatus.ACCEPTED
        and current_user.role == UserRole.PROVIDER
    ):
        provider_id = current_user.id

    record = await service_requests.update_service_status(
        repository,
        estimators,
        service_id,
        payload.status,
        provider_id,
    )

    await send_webhook(status_change_payload(record))

    return build_service_response(record)
