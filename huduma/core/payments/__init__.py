"""
Payments domain.
"""

from huduma.core.payments.models import MpesaPaymentRequest, MpesaPaymentResult

__all__ = [
    "MpesaPaymentRequest",
    "MpesaPaymentResult",
]
