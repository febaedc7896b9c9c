"""Authentication endpoints used by the web client."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from planbee.interfaces.http.deps import get_account_service, get_current_account
from planbee.modules.accounts import (
    Account,
    AccountAlreadyExistsError,
    AccountCreateInput,
    AccountNotFoundError,
    AccountService,
    AccountValidationError,
    InvalidCredentialsError,
    TagChangeCooldownError,
)
from planbee.schemas import (
    AuthResponse,
    ChangeTagRequest,
    ChangeTagResponse,
    ErrorResponse,
    LoginRequest,
    MeResponse,
    PublicAccount,
    RegisterRequest,
)

router = APIRouter()
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


def _server_error(operation: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Server error during {operation}",
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Register a new user",
)
async def register(
    payload: RegisterRequest,
    account_service: AccountService = Depends(get_account_service),
) -> AuthResponse:
    try:
        result = await account_service.register(
            AccountCreateInput(
                email=payload.email,
                password=payload.password,
                tag=payload.tag,
                username=payload.username,
            )
        )
    except (AccountValidationError, AccountAlreadyExistsError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except Exception as exc:
        logger.exception("Registration error")
        raise _server_error("registration") from exc

    return AuthResponse(
        success=True,
        message="User registered successfully",
        token=result.token,
        user=PublicAccount.from_account(result.account),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses=ERROR_RESPONSES,
    summary="Login with email or tag",
)
async def login(
    payload: LoginRequest,
    account_service: AccountService = Depends(get_account_service),
) -> AuthResponse:
    try:
        result = await account_service.login(payload.identifier, payload.password)
    except (AccountValidationError, InvalidCredentialsError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except Exception as exc:
        logger.exception("Login error")
        raise _server_error("login") from exc

    return AuthResponse(
        success=True,
        message="Login successful",
        token=result.token,
        user=PublicAccount.from_account(result.account),
    )


@router.post(
    "/change-tag",
    response_model=ChangeTagResponse,
    responses={
        **ERROR_RESPONSES,
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
        status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
    },
    summary="Change user tag (allowed every 3 months)",
)
async def change_tag(
    payload: ChangeTagRequest,
    account: Account = Depends(get_current_account),
    account_service: AccountService = Depends(get_account_service),
) -> ChangeTagResponse:
    try:
        change = await account_service.change_tag(account.id, payload.new_tag)
    except AccountNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc
    except TagChangeCooldownError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"message": exc.message, "nextChangeAllowed": exc.next_allowed.isoformat()},
        ) from exc
    except (AccountValidationError, AccountAlreadyExistsError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except Exception as exc:
        logger.exception("Change tag error")
        raise _server_error("tag change") from exc

    return ChangeTagResponse(
        success=True,
        message="Tag changed successfully",
        old_tag=change.old_tag,
        new_tag=change.new_tag,
    )


@router.get(
    "/me",
    response_model=MeResponse,
    responses={status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse}},
    summary="Current user profile",
)
async def me(account: Account = Depends(get_current_account)) -> MeResponse:
    return MeResponse(success=True, message="Authenticated", user=PublicAccount.from_account(account))
