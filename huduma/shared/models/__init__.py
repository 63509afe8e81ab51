from huduma.shared.models.common import ErrorResponse, HealthStatus, SuccessResponse

__all__ = [
    "ErrorResponse",
    "HealthStatus",
    "SuccessResponse",
]
