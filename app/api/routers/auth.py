from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_account
from app.db.session import get_session
from app.schemas.auth import CurrentAccount, LoginData, UserLoginModel, UserProfile
from app.schemas.common import ApiResponse
from app.services.account_service import account_service

router = APIRouter()


# ==============================
# LOGIN ENDPOINT
# ==============================
@router.post("/login", response_model=ApiResponse[LoginData])
async def login_for_access_token(
    form_data: UserLoginModel,
    session: AsyncSession = Depends(get_session),
):
    """
    Authenticate a back-office account and provide an access token.

    Steps:
    1. Retrieve the account by email.
    2. Verify the password and that the account is active.
    3. Stamp the last login time.
    4. Return a bearer JWT (24h) with the account summary.

    Args:
        form_data (UserLoginModel): Email and password.
        session (AsyncSession): SQLAlchemy async session.

    Returns:
        ApiResponse[LoginData]: Token and account summary.
    """
    data = await account_service.login(form_data.email, form_data.password, session)
    return ApiResponse(message="Login successful", data=data)


# ==============================
# CURRENT ACCOUNT ENDPOINT
# ==============================
@router.get("/me", response_model=ApiResponse[UserProfile])
async def read_current_account(
    current_account: CurrentAccount = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
):
    """Profile of the account behind the bearer token."""
    profile = await account_service.get_profile(current_account, session)
    return ApiResponse(data=profile)
