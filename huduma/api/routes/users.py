from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from huduma.api.dependencies import get_user_service
from huduma.core.users.models import User, UserCreateDTO
from huduma.core.users.service import UserService
from huduma.shared.models.common import ErrorResponse

router = APIRouter(prefix="/api", tags=["Users"])


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phone_number: str = Field(..., alias="phoneNumber")


@router.post("/auth/register", response_model=User, responses={400: {"model": ErrorResponse}})
async def register(
    request: UserCreateDTO,
    service: UserService = Depends(get_user_service),
):
    return await service.register(request)


@router.post("/auth/login", response_model=User, responses={404: {"model": ErrorResponse}})
async def login(
    request: LoginRequest,
    service: UserService = Depends(get_user_service),
):
    return await service.login(request.phone_number)


@router.get("/users/{user_id}", response_model=User, responses={404: {"model": ErrorResponse}})
async def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
):
    return await service.get_user(user_id)
