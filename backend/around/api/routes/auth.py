"""
Account endpoints.

- POST /signup  create an account
- POST /login   exchange credentials for a token (plain-text body)

Neither endpoint requires a token.
"""

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import PlainTextResponse

from around.api.deps import get_account_service
from around.core.logging import get_logger
from around.schemas.auth import UserLogin, UserSignup
from around.services.accounts import AccountService

logger = get_logger(__name__)

router = APIRouter(tags=["authentication"])


@router.post("/signup", status_code=status.HTTP_200_OK)
async def signup(
    user_data: UserSignup,
    accounts: AccountService = Depends(get_account_service),
) -> Response:
    """
    Register a new user.

    Request Body:
    -------------
    {"username": "alice", "password": "pw1", "age": 30, "gender": "f"}

    Raises:
        400: Missing/invalid username or password, or username taken
    """
    logger.info("signup_received", username=user_data.username)
    await accounts.signup(user_data)
    return Response(status_code=status.HTTP_200_OK)


@router.post("/login", response_class=PlainTextResponse)
async def login(
    credentials: UserLogin,
    accounts: AccountService = Depends(get_account_service),
) -> PlainTextResponse:
    """
    Log in and receive a token valid for 24 hours.

    Client should then send:
    ------------------------
    Authorization: Bearer <token>

    Raises:
        401: Unknown user or wrong password
    """
    logger.info("login_received", username=credentials.username)
    token = await accounts.login(credentials.username, credentials.password)
    return PlainTextResponse(token)
