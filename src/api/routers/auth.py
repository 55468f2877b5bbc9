"""Registration and login endpoints."""

from fastapi import APIRouter, status

from src.api.constants import API_V1_PREFIX
from src.api.dependencies import AuthServiceDep
from src.api.schemas.auth import LoginRequest, RegisterRequest
from src.api.schemas.envelope import ErrorResponse, SuccessResponse
from src.domain.users.schemas import AuthResponse

router = APIRouter(
    prefix=f"{API_V1_PREFIX}/auth",
    tags=["auth"],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse},
    },
)


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest, service: AuthServiceDep
) -> SuccessResponse[AuthResponse]:
    """Create an account and return a bearer token for it."""
    result = await service.register(body.username, str(body.email), body.password)
    return SuccessResponse[AuthResponse](
        status_code=status.HTTP_201_CREATED,
        message="Success register user",
        data=result,
    )


@router.post(
    "/login",
    responses={status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse}},
)
async def login(
    body: LoginRequest, service: AuthServiceDep
) -> SuccessResponse[AuthResponse]:
    """Exchange email and password for a bearer token."""
    result = await service.login(str(body.email), body.password)
    return SuccessResponse[AuthResponse](
        status_code=status.HTTP_200_OK,
        message="Success login user",
        data=result,
    )
