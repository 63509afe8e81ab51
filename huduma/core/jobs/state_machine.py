from huduma.common.constants import JobStatus


class JobStateMachine:
    ALLOWED_TRANSITIONS = {
        JobStatus.PENDING: [JobStatus.ACCEPTED, JobStatus.CANCELLED],
        JobStatus.ACCEPTED: [JobStatus.IN_PROGRESS, JobStatus.CANCELLED],
        JobStatus.IN_PROGRESS: [JobStatus.COMPLETED, JobStatus.CANCELLED],
        JobStatus.COMPLETED: [],
        JobStatus.CANCELLED: [],
    }

    @staticmethod
    def can_transition(current_status: str, new_status: str) -> bool:
        try:
            curr = JobStatus(current_status)
            new = JobStatus(new_status)
        except ValueError:
            return False
        if curr == new:
            return True
        return new in JobStateMachine.ALLOWED_TRANSITIONS.get(curr, [])
