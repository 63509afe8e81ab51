"""
Job lifecycle notifier.
Decides who hears about a job change and hands the event to the dispatcher.
"""

from __future__ import annotations

from huduma.common.constants import TypeMsg
from huduma.common.logger import log_info
from huduma.core.jobs.models import Job
from huduma.realtime.dispatcher import Dispatcher
from huduma.realtime.events import JobUpdatedEvent, NewJobRequestEvent


class JobLifecycleNotifier:
    """
    Fan-out of job events.

    Delivery is best effort: the job is already persisted when these run.
    """

    def __init__(self, dispatcher: Dispatcher) -> None:
        """
        Args:
            dispatcher: Push dispatcher
        """
        self._dispatcher = dispatcher

    async def job_created(self, job: Job) -> int:
        """
        Offers a new job to its provider. The customer is not notified.

        Returns:
            Number of successful pushes (0 or 1)
        """
        if job.provider_id is None:
            return 0

        delivered = await self._dispatcher.deliver(job.provider_id, NewJobRequestEvent(job=job))

        await log_info(
            f"new_job_request for job {job.id} -> provider {job.provider_id} (delivered={delivered})",
            type_msg=TypeMsg.DEBUG,
        )
        return int(delivered)

    async def job_updated(self, job: Job) -> int:
        """
        Sends the full job snapshot to every participant.

        Returns:
            Number of successful pushes
        """
        event = JobUpdatedEvent(job=job)
        delivered = 0
        for user_id in job.participants:
            if await self._dispatcher.deliver(user_id, event):
                delivered += 1

        await log_info(
            f"job_updated for job {job.id} delivered to {delivered}/{len(job.participants)}",
            type_msg=TypeMsg.DEBUG,
        )
        return delivered
