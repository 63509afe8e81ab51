"""
M-Pesa payment service.

Only the simulated gateway exists: the payment is accepted immediately and
the job is marked paid through JobService, so participants get job_updated.
"""

from __future__ import annotations

import time
from typing import Optional

from huduma.common.constants import JobStatus, PaymentStatus, TypeMsg
from huduma.common.errors import PaymentError, ValidationError
from huduma.common.logger import log_info
from huduma.config.loader import PaymentSettings
from huduma.core.jobs.models import JobUpdateDTO
from huduma.core.jobs.service import JobService
from huduma.core.payments.models import MpesaPaymentRequest, MpesaPaymentResult


class MpesaPaymentService:
    """Initiates M-Pesa payments for jobs."""

    def __init__(self, jobs: JobService, config: Optional[PaymentSettings] = None) -> None:
        """
        Args:
            jobs: Job service (marks the job paid)
            config: Payment settings, global settings by default
        """
        if config is None:
            from huduma.config import settings
            config = settings.payments

        self._jobs = jobs
        self._config = config

    async def initiate(self, request: MpesaPaymentRequest) -> MpesaPaymentResult:
        """
        Raises:
            ValidationError: amount out of range, job cancelled or already paid
            NotFoundError: job does not exist
            PaymentError: no gateway configured
        """
        if not self._config.MPESA_SIMULATE:
            raise PaymentError("M-Pesa gateway is not configured")

        if not self._config.MPESA_MIN_AMOUNT <= request.amount <= self._config.MPESA_MAX_AMOUNT:
            raise ValidationError(
                f"Amount must be between {self._config.MPESA_MIN_AMOUNT:g} "
                f"and {self._config.MPESA_MAX_AMOUNT:g} {self._config.CURRENCY}",
                {"amount": request.amount},
            )

        job = await self._jobs.get_job(request.job_id)
        if job.status == JobStatus.CANCELLED:
            raise ValidationError("Cancelled jobs cannot be paid", {"job_id": job.id})
        if job.payment_status == PaymentStatus.PAID:
            raise ValidationError("Job is already paid", {"job_id": job.id})

        transaction_id = f"{self._config.MPESA_TRANSACTION_PREFIX}{int(time.time() * 1000)}"

        await self._jobs.update_job(job.id, JobUpdateDTO(payment_status=PaymentStatus.PAID))

        await log_info(
            f"M-Pesa payment {transaction_id}: {request.amount:g} {self._config.CURRENCY} for job {job.id}",
            type_msg=TypeMsg.INFO,
        )

        return MpesaPaymentResult(
            success=True,
            transaction_id=transaction_id,
            amount=request.amount,
            phone_number=request.phone_number,
            job_id=request.job_id,
        )
