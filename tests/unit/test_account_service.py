# tests/unit/test_account_service.py
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import verify_password
from app.db.models import AccountRole
from app.errors import DataValidationError
from app.services.account_service import account_service


@pytest.mark.asyncio
async def test_create_or_update_creates_then_updates(db_session: AsyncSession):
    created = await account_service.create_or_update(
        db_session, email="Boss@Example.com", password="first-password", name="Boss"
    )
    assert created.email == "boss@example.com"
    assert created.role == AccountRole.ADMIN

    updated = await account_service.create_or_update(
        db_session,
        email="boss@example.com",
        password="second-password",
        name="The Boss",
        role=AccountRole.AGENT,
        is_active=False,
    )
    assert updated.id == created.id
    assert updated.name == "The Boss"
    assert updated.role == AccountRole.AGENT
    assert updated.is_active is False
    assert verify_password("second-password", updated.password_hash)


@pytest.mark.asyncio
async def test_create_or_update_validates_input(db_session: AsyncSession):
    with pytest.raises(DataValidationError) as exc_info:
        await account_service.create_or_update(db_session, email="x@example.com", password="short", name=" ")

    fields = [detail["field"] for detail in exc_info.value.details]
    assert fields == ["password", "name"]
    assert await account_service.get_account_by_email("x@example.com", db_session) is None
