# tests/core/test_payments_service.py
"""
Tests for MpesaPaymentService (simulated gateway).
"""

from __future__ import annotations

import json

import pytest

from huduma.common.constants import JobStatus, PaymentStatus
from huduma.common.errors import NotFoundError, PaymentError, ValidationError
from huduma.config.loader import PaymentSettings
from huduma.core.jobs.service import JobService
from huduma.core.payments.models import MpesaPaymentRequest
from huduma.core.payments.service import MpesaPaymentService


@pytest.fixture
def job_service(jobs_repo, users_repo, notifier) -> JobService:
    return JobService(jobs_repo, users_repo, notifier)


@pytest.fixture
def payments(job_service) -> MpesaPaymentService:
    return MpesaPaymentService(job_service, PaymentSettings(MPESA_SIMULATE=True))


def _request(job_id: str, amount: float = 2500) -> MpesaPaymentRequest:
    return MpesaPaymentRequest(amount=amount, phone_number="+254712345678", job_id=job_id)


class TestInitiate:

    @pytest.mark.asyncio
    async def test_marks_job_paid(self, payments, jobs_repo, job) -> None:
        result = await payments.initiate(_request(job.id))

        assert result.success is True
        assert result.transaction_id.startswith("TX")
        assert result.transaction_id[2:].isdigit()
        assert result.amount == 2500
        assert result.job_id == job.id
        assert jobs_repo.jobs[job.id].payment_status == PaymentStatus.PAID

    @pytest.mark.asyncio
    async def test_participants_see_job_update(
        self, payments, registry, channel_factory, job, customer,
    ) -> None:
        customer_channel = channel_factory()
        registry.register(customer.id, customer_channel)

        await payments.initiate(_request(job.id))

        (payload,) = customer_channel.sent
        event = json.loads(payload)
        assert event["type"] == "job_updated"
        assert event["job"]["paymentStatus"] == "paid"

    @pytest.mark.asyncio
    async def test_result_serializes_camel_case(self, payments, job) -> None:
        result = await payments.initiate(_request(job.id))

        data = result.model_dump(by_alias=True)
        assert set(data) == {"success", "transactionId", "amount", "phoneNumber", "jobId"}

    @pytest.mark.asyncio
    async def test_unknown_job(self, payments) -> None:
        with pytest.raises(NotFoundError):
            await payments.initiate(_request("missing"))

    @pytest.mark.asyncio
    async def test_already_paid(self, payments, job) -> None:
        await payments.initiate(_request(job.id))

        with pytest.raises(ValidationError):
            await payments.initiate(_request(job.id))

    @pytest.mark.asyncio
    async def test_cancelled_job(self, payments, jobs_repo, customer, provider) -> None:
        cancelled = jobs_repo.add(customer.id, provider.id, JobStatus.CANCELLED)

        with pytest.raises(ValidationError):
            await payments.initiate(_request(cancelled.id))

    @pytest.mark.asyncio
    async def test_amount_above_limit(self, job_service, job) -> None:
        service = MpesaPaymentService(job_service, PaymentSettings(MPESA_MAX_AMOUNT=1000))

        with pytest.raises(ValidationError):
            await service.initiate(_request(job.id, amount=1500))

    @pytest.mark.asyncio
    async def test_gateway_not_configured(self, job_service, jobs_repo, job) -> None:
        service = MpesaPaymentService(job_service, PaymentSettings(MPESA_SIMULATE=False))

        with pytest.raises(PaymentError):
            await service.initiate(_request(job.id))

        assert jobs_repo.jobs[job.id].payment_status == PaymentStatus.PENDING

    def test_non_positive_amount_rejected(self) -> None:
        with pytest.raises(ValueError):
            MpesaPaymentRequest(amount=0, phone_number="+254712345678", job_id="job")
