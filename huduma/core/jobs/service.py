"""
Job service.
Creation, partial updates with status transitions, lifecycle fan-out.
"""

from __future__ import annotations

from huduma.common.constants import JobStatus, TypeMsg, UserType
from huduma.common.errors import NotFoundError, ValidationError
from huduma.common.logger import log_info
from huduma.core.jobs.models import Job, JobCreateDTO, JobUpdateDTO
from huduma.core.jobs.repository import JobRepository
from huduma.core.jobs.state_machine import JobStateMachine
from huduma.core.notifications.service import JobLifecycleNotifier
from huduma.core.users.repository import UserRepository


class JobService:
    """
    Job business logic.

    Every mutation is persisted first; the notifier runs afterwards and
    cannot undo it.
    """

    def __init__(
        self,
        repository: JobRepository,
        users: UserRepository,
        notifier: JobLifecycleNotifier,
    ) -> None:
        """
        Args:
            repository: Job repository
            users: User repository (participant checks)
            notifier: Lifecycle fan-out
        """
        self._repo = repository
        self._users = users
        self._notifier = notifier

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def get_job(self, job_id: str) -> Job:
        job = await self._repo.get_by_id(job_id)
        if job is None:
            raise NotFoundError.for_entity("Job", job_id)
        return job

    async def list_jobs_for_user(self, user_id: str, user_type: UserType) -> list[Job]:
        return await self._repo.list_for_user(user_id, user_type)

    # =========================================================================
    # COMMANDS
    # =========================================================================

    async def create_job(self, dto: JobCreateDTO) -> Job:
        """
        Creates a job and offers it to the chosen provider, if any.

        Raises:
            ValidationError: customer and provider are the same user
            NotFoundError: customer or provider does not exist
        """
        await self._require_user(dto.customer_id, "Customer")
        if dto.provider_id is not None:
            if dto.provider_id == dto.customer_id:
                raise ValidationError("A job cannot be booked with yourself")
            await self._require_user(dto.provider_id, "Provider")

        job = await self._repo.create(Job(**dto.model_dump()))

        await log_info(
            f"Job {job.id} created (customer={job.customer_id}, provider={job.provider_id})",
            type_msg=TypeMsg.INFO,
        )

        await self._notifier.job_created(job)
        return job

    async def update_job(self, job_id: str, dto: JobUpdateDTO) -> Job:
        """
        Applies a partial update and notifies both participants.

        Raises:
            NotFoundError: job (or newly assigned provider) does not exist
            ValidationError: empty update, illegal status transition,
                accepting without a provider, provider equals customer,
                provider changed after the job left pending
        """
        changes = dto.changes()
        if not changes:
            raise ValidationError("No fields to update", {"job_id": job_id})

        current = await self.get_job(job_id)

        if (
            "provider_id" in changes
            and changes["provider_id"] != current.provider_id
            and current.status != JobStatus.PENDING
        ):
            raise ValidationError(
                "The provider can only change while the job is pending",
                {"job_id": job_id, "status": current.status.value},
            )

        if "provider_id" in changes and changes["provider_id"] is not None:
            provider_id = changes["provider_id"]
            if provider_id == current.customer_id:
                raise ValidationError("A job cannot be booked with yourself")
            await self._require_user(provider_id, "Provider")

        if "status" in changes:
            new_status = changes["status"]
            if not JobStateMachine.can_transition(current.status.value, new_status):
                raise ValidationError(
                    f"Invalid status transition: {current.status.value} -> {new_status}",
                    {"from": current.status.value, "to": new_status},
                )
            provider_after = changes.get("provider_id", current.provider_id)
            if new_status == JobStatus.ACCEPTED.value and provider_after is None:
                raise ValidationError("A job needs a provider to be accepted")

        job = await self._repo.update(job_id, changes)
        if job is None:
            raise NotFoundError.for_entity("Job", job_id)

        await log_info(
            f"Job {job_id} updated: {', '.join(sorted(changes))}",
            type_msg=TypeMsg.INFO,
        )

        await self._notifier.job_updated(job)
        return job

    async def _require_user(self, user_id: str, role: str) -> None:
        if await self._users.get_by_id(user_id) is None:
            raise NotFoundError.for_entity(role, user_id)
