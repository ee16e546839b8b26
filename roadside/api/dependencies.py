from functools import lru_cache
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from roadside.db.session import get_db
from roadside.repositories.service_requests import ServiceRequestRepository
from roadside.services.service_requests import Estimators, build_estimators


def get_service_repository(db: AsyncSession = Depends(get_db)) -> ServiceRequestRepository:
    return ServiceRequestRepository(db)


@lru_cache
def get_estimators() -> Estimators:
    return build_estimators()
