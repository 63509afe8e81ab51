from fastapi import APIRouter, Depends, Query

from huduma.api.dependencies import get_job_service
from huduma.common.constants import UserType
from huduma.core.jobs.models import Job, JobCreateDTO, JobUpdateDTO
from huduma.core.jobs.service import JobService
from huduma.shared.models.common import ErrorResponse

router = APIRouter(prefix="/api/jobs", tags=["Jobs"])

_errors = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.post("", response_model=Job, responses=_errors)
async def create_job(
    request: JobCreateDTO,
    service: JobService = Depends(get_job_service),
):
    return await service.create_job(request)


@router.patch("/{job_id}", response_model=Job, responses=_errors)
async def update_job(
    job_id: str,
    request: JobUpdateDTO,
    service: JobService = Depends(get_job_service),
):
    return await service.update_job(job_id, request)


@router.get("/detail/{job_id}", response_model=Job, responses=_errors)
async def get_job(
    job_id: str,
    service: JobService = Depends(get_job_service),
):
    return await service.get_job(job_id)


@router.get("/{user_id}", response_model=list[Job])
async def list_jobs(
    user_id: str,
    user_type: UserType = Query(..., alias="userType"),
    service: JobService = Depends(get_job_service),
):
    return await service.list_jobs_for_user(user_id, user_type)
