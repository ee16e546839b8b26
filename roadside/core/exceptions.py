"""Domain exceptions raised by the pricing core and the request store"""
from typing import Optional
from fastapi import status


class ServiceError(Exception):

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "service_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ServiceError):
    """Malformed input: bad coordinates, unknown service type, missing field"""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "validation_error"


class NotFoundError(ServiceError):

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"

    def __init__(self, resource: str, resource_id: Optional[object] = None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with id {resource_id} not found"
        super().__init__(message)


class StorageError(ServiceError):
    """Persistence layer failure, distinct from a missing record"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "storage_unavailable"


class UpstreamUnavailable(ServiceError):
    """Weather provider failure; recovered inside the weather lookup"""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "upstream_unavailable"
