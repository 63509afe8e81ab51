"""
Shared utilities: constants, errors and the logger.
"""

from huduma.common.logger import get_logger, log_info, log_error, log_warning, log_debug
from huduma.common.constants import TypeMsg
from huduma.common.errors import (
    DeliveryFailure,
    HudumaError,
    NotFoundError,
    PaymentError,
    ValidationError,
)

__all__ = [
    "get_logger",
    "log_info",
    "log_error",
    "log_warning",
    "log_debug",
    "TypeMsg",
    "HudumaError",
    "ValidationError",
    "NotFoundError",
    "DeliveryFailure",
    "PaymentError",
]
