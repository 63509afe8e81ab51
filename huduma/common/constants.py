"""
Common constants and enumerations.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Log message levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class UserType(str, Enum):
    """Marketplace roles."""
    CUSTOMER = "customer"
    PROVIDER = "provider"


class JobStatus(str, Enum):
    """Job (booking) statuses."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Job payment statuses."""
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


class MessageType(str, Enum):
    """Chat message content types."""
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"


class PushEventType(str, Enum):
    """Event tags pushed over a live channel."""
    NEW_MESSAGE = "new_message"
    NEW_JOB_REQUEST = "new_job_request"
    JOB_UPDATED = "job_updated"


# WebSocket close codes sent by the push endpoint
SUPERSEDED_CLOSE_CODE = 4000    # a newer connection of the same user replaced this one
PUSH_FAILED_CLOSE_CODE = 1011   # a push could not be sent; the client should re-attach
