from fastapi import APIRouter, Depends

from huduma.api.dependencies import get_payment_service
from huduma.core.payments.models import MpesaPaymentRequest, MpesaPaymentResult
from huduma.core.payments.service import MpesaPaymentService
from huduma.shared.models.common import ErrorResponse

router = APIRouter(prefix="/api/payments", tags=["Payments"])


@router.post(
    "/mpesa",
    response_model=MpesaPaymentResult,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def pay_with_mpesa(
    request: MpesaPaymentRequest,
    service: MpesaPaymentService = Depends(get_payment_service),
):
    return await service.initiate(request)
