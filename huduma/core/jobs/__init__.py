"""
Jobs domain.
Models, persistence and status transitions of service bookings.
"""

from huduma.core.jobs.models import Job, JobCreateDTO, JobUpdateDTO
from huduma.core.jobs.repository import JobRepository
from huduma.core.jobs.state_machine import JobStateMachine

__all__ = [
    "Job",
    "JobCreateDTO",
    "JobUpdateDTO",
    "JobRepository",
    "JobStateMachine",
]
