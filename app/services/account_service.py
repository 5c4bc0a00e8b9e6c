from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.auth import create_access_token, generate_passwd_hash, verify_password
from app.core.logging import get_logger
from app.db.models import AccountRole, AdminUser, utcnow
from app.db.repositories.account_repo import account_repo
from app.errors import AccountNotFound, DataValidationError, InvalidCredentials
from app.schemas.auth import CurrentAccount, LoginData, UserProfile, UserPublic

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 8


class AccountService:
    async def get_account_by_email(
        self, email: str, session: AsyncSession
    ) -> Optional[AdminUser]:
        """Retrieve an account by its email address."""
        return await account_repo.get_by_email(session, email=email)

    async def authenticate(
        self, email: str, password: str, session: AsyncSession
    ) -> AdminUser:
        """Check credentials; every failure reads the same to the caller."""
        account = await self.get_account_by_email(email, session)
        if account is None:
            logger.info(f"Login failed for unknown email {email}")
            raise InvalidCredentials()
        if not verify_password(password, account.password_hash):
            logger.info(f"Login failed for {account.id}: wrong password")
            raise InvalidCredentials()
        if not account.is_active:
            logger.info(f"Login refused for disabled account {account.id}")
            raise InvalidCredentials()
        return account

    async def login(self, email: str, password: str, session: AsyncSession) -> LoginData:
        account = await self.authenticate(email, password, session)

        account.last_login = utcnow()
        account = await account_repo.save(session, obj=account)

        token = create_access_token(account=account)
        logger.info(f"Account {account.id} logged in")
        return LoginData(token=token, user=UserPublic.model_validate(account))

    async def get_profile(self, current: CurrentAccount, session: AsyncSession) -> UserProfile:
        account = await account_repo.get(session, id=current.id)
        if account is None:
            raise AccountNotFound()
        return UserProfile.model_validate(account)

    async def create_or_update(
        self,
        session: AsyncSession,
        *,
        email: str,
        password: str,
        name: str,
        role: AccountRole = AccountRole.ADMIN,
        is_active: bool = True,
    ) -> AdminUser:
        """Upsert a back-office account by email."""
        details = []
        if len(password) < MIN_PASSWORD_LENGTH:
            details.append({"field": "password", "message": f"Must be at least {MIN_PASSWORD_LENGTH} characters"})
        if not name.strip():
            details.append({"field": "name", "message": "Must not be empty"})
        if details:
            raise DataValidationError(details=details)

        account = await self.get_account_by_email(email, session)
        if account is None:
            account = AdminUser(
                email=email.lower(),
                password_hash=generate_passwd_hash(password),
                name=name,
                role=role,
                is_active=is_active,
            )
            account = await account_repo.create(session, obj_in=account)
            logger.info(f"Created {role.value} account {account.id}")
            return account

        account.password_hash = generate_passwd_hash(password)
        account.name = name
        account.role = role
        account.is_active = is_active
        account = await account_repo.save(session, obj=account)
        logger.info(f"Updated {role.value} account {account.id}")
        return account


account_service = AccountService()
