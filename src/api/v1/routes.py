"""
API v1 routes.

Defines REST endpoints over the identity service. Handlers are plain
functions so FastAPI runs them in its threadpool; bcrypt work does not
block the event loop.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.dependencies import get_identity_service
from src.api.models import (
    DeleteResponse,
    ErrorResponse,
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    UpdateUserRequest,
    UpdateUserResponse,
    UserEnvelope,
    UserListResponse,
    UserResponse,
)
from src.domain.exceptions import (
    EmailAlreadyRegistered,
    IdentifierExhausted,
    InvalidCredentials,
    MissingRequiredFields,
    NoUsersFound,
    PasswordTooLong,
    StorageError,
    UserNotFound,
)
from src.domain.identity import IdentityService
from src.domain.models import UserUpdate

router = APIRouter(tags=["v1"])

_storage_unavailable = {503: {"model": ErrorResponse, "description": "Snapshot write failed"}}


def _storage_failed() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Storage unavailable",
    )


def _user_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


def _invalid_input(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))


@router.get(
    "/users",
    response_model=UserListResponse,
    responses={404: {"model": ErrorResponse, "description": "No users registered"}},
    summary="List all users",
)
def list_users(service: IdentityService = Depends(get_identity_service)) -> UserListResponse:
    try:
        records = service.list_users()
    except NoUsersFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No users at this time",
        ) from None
    return UserListResponse(
        total_user=len(records),
        allUsers=[UserResponse.from_record(record) for record in records],
    )


@router.get(
    "/user/{user_id}",
    response_model=UserEnvelope,
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
    summary="Get a user by id",
)
def get_user(
    user_id: str,
    service: IdentityService = Depends(get_identity_service),
) -> UserEnvelope:
    try:
        record = service.get_user(user_id)
    except UserNotFound:
        raise _user_not_found() from None
    return UserEnvelope(user=UserResponse.from_record(record))


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse, "description": "Email already registered"},
        422: {"description": "Validation error"},
        **_storage_unavailable,
    },
    summary="Register a new user",
)
def register(
    request_data: RegisterRequest,
    service: IdentityService = Depends(get_identity_service),
) -> RegisterResponse:
    """
    Register a new user.

    - **username**: Display name
    - **email**: Login email, must not be registered yet
    - **password**: Password (stored as a bcrypt digest)
    """
    try:
        record = service.register(request_data.username, request_data.email, request_data.password)
    except EmailAlreadyRegistered:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This email has already been registered",
        ) from None
    except (MissingRequiredFields, PasswordTooLong) as e:
        raise _invalid_input(e) from None
    except IdentifierExhausted:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not allocate a user id",
        ) from None
    except StorageError:
        raise _storage_failed() from None
    return RegisterResponse(newUser=UserResponse.from_record(record))


@router.post(
    "/login",
    response_model=UserEnvelope,
    responses={
        401: {"model": ErrorResponse, "description": "Incorrect password"},
        404: {"model": ErrorResponse, "description": "Unknown email"},
        422: {"description": "Validation error"},
    },
    summary="Verify email and password",
)
def login(
    request_data: LoginRequest,
    service: IdentityService = Depends(get_identity_service),
) -> UserEnvelope:
    try:
        record = service.authenticate(request_data.email, request_data.password)
    except UserNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No user exists with the email provided",
        ) from None
    except InvalidCredentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect password",
        ) from None
    return UserEnvelope(user=UserResponse.from_record(record))


@router.put(
    "/user/{user_id}",
    response_model=UpdateUserResponse,
    responses={
        404: {"model": ErrorResponse, "description": "User not found"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
        422: {"description": "Validation error"},
        **_storage_unavailable,
    },
    summary="Update a user",
)
def update_user(
    user_id: str,
    request_data: UpdateUserRequest,
    service: IdentityService = Depends(get_identity_service),
) -> UpdateUserResponse:
    """Overlay the supplied fields on the user; omitted fields keep their value."""
    update = UserUpdate(
        username=request_data.username,
        email=request_data.email,
        password=request_data.password,
    )
    try:
        record = service.update_user(user_id, update)
    except UserNotFound:
        raise _user_not_found() from None
    except EmailAlreadyRegistered:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This email has already been registered",
        ) from None
    except (MissingRequiredFields, PasswordTooLong) as e:
        raise _invalid_input(e) from None
    except StorageError:
        raise _storage_failed() from None
    return UpdateUserResponse(updateUser=UserResponse.from_record(record))


@router.delete(
    "/user/{user_id}",
    response_model=DeleteResponse,
    responses={
        404: {"model": ErrorResponse, "description": "User not found"},
        **_storage_unavailable,
    },
    summary="Delete a user",
)
def delete_user(
    user_id: str,
    service: IdentityService = Depends(get_identity_service),
) -> DeleteResponse:
    try:
        service.delete_user(user_id)
    except UserNotFound:
        raise _user_not_found() from None
    except StorageError:
        raise _storage_failed() from None
    return DeleteResponse(msg="User deleted")
