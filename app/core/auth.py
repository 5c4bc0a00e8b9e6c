# app/core/auth.py
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings, Settings
from app.core.logging import get_logger
from app.db.models import AccountRole, AdminUser
from app.db.repositories.account_repo import account_repo
from app.db.session import get_session
from app.errors import InsufficientPermission, InvalidToken, UnAuthenticated
from app.schemas.auth import CurrentAccount


passwd_context = CryptContext(schemes=["bcrypt"], bcrypt__rounds=12)
logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def generate_passwd_hash(password: str) -> str:
    return passwd_context.hash(password)


def verify_password(password: str, hash: str) -> bool:
    return passwd_context.verify(password, hash)


def create_access_token(
    account: AdminUser,
    expires_delta: timedelta | None = None,
    settings: Settings = settings,
) -> str:
    to_encode = {
        "sub": account.email,
        "id": str(account.id),
        "email": account.email,
        "role": account.role.value if isinstance(account.role, AccountRole) else account.role,
        "exp": datetime.now(timezone.utc)
        + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)),
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str, settings: Settings = settings) -> dict:
    """Verify signature and expiry; raise InvalidToken on any failure."""
    try:
        return jwt.decode(token, key=settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise InvalidToken()
    except jwt.PyJWTError as e:
        logger.info(f"Rejected token: {e}")
        raise InvalidToken()


def get_current_account_dependency(settings: Settings = settings):
    async def get_current_account(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        session: AsyncSession = Depends(get_session),
    ) -> CurrentAccount:
        if credentials is None or not credentials.credentials:
            raise UnAuthenticated()

        payload = decode_token(credentials.credentials, settings)
        account_id = payload.get("id")
        if not account_id:
            raise InvalidToken()

        # Re-read the account so deactivation takes effect before the token expires
        account = await account_repo.get(session, id=str(account_id))
        if account is None or not account.is_active:
            raise InvalidToken()

        return CurrentAccount(
            id=account.id,
            email=account.email,
            name=account.name,
            role=account.role,
        )

    return get_current_account


get_current_account = get_current_account_dependency(settings=settings)


# Role-based access control dependencies
def require_roles(*roles: AccountRole):
    """Dependency factory allowing only the given roles through."""
    allowed = frozenset(roles)

    def role_checker(current_account: CurrentAccount = Depends(get_current_account)) -> CurrentAccount:
        if current_account.role not in allowed:
            raise InsufficientPermission()
        return current_account

    return role_checker


require_staff = require_roles(AccountRole.ADMIN, AccountRole.AGENT)
require_admin = require_roles(AccountRole.ADMIN)
