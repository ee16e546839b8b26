"""Authorization rules for service requests"""
from fastapi import HTTPException
from roadside.core.enums import ServiceStatus, UserRole


def check_ownership(owner_id: str, current_user, resource_name: str = "Resource") -> None:

    if current_user.role == UserRole.CUSTOMER and owner_id != current_user.id:
        raise HTTPException(
            status_code=403,
            detail=f"Forbidden: You can only access your own {resource_name}s"
        )


def check_status_change_allowed(new_status: ServiceStatus, current_user) -> None:

    if current_user.role == UserRole.CUSTOMER and new_status != ServiceStatus.CANCELLED:
        raise HTTPException(
            status_code=403,
            detail="Forbidden: Customers can only cancel their service requests"
        )
