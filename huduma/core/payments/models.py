"""
Mobile-money payment models.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MpesaPaymentRequest(BaseModel):
    """STK push request for a job."""

    model_config = ConfigDict(populate_by_name=True)

    amount: float = Field(..., gt=0)
    phone_number: str = Field(..., alias="phoneNumber", min_length=7, max_length=20)
    job_id: str = Field(..., alias="jobId")


class MpesaPaymentResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    transaction_id: str = Field(..., alias="transactionId")
    amount: float
    phone_number: str = Field(..., alias="phoneNumber")
    job_id: str = Field(..., alias="jobId")
