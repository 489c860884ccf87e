"""Tests for the profile service: field sequencing and persistence calls."""
from collections.abc import Generator
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from core.auth_cache import AuthCache
from core.mail import MailSender
from core.security import verify_password
from models.user import User
from schemas.current_user import CurrentUser
from schemas.profile import ProfileUpdateQuery
from services import profile_service
from services.exceptions import InvalidVerificationTokenError, UserNotFoundError
from services.user_service import to_current_user
from tests.helpers import InMemoryRedis

VERIFY_URL = "https://example.com/profile/email-verification"


@pytest.fixture
def update_statements(async_engine: AsyncEngine) -> Generator[list[str]]:
    """Record every UPDATE sent to the database."""
    statements: list[str] = []

    def record(_conn, _cursor, statement, _params, _context, _executemany) -> None:  # noqa: ANN001
        if statement.lstrip().upper().startswith("UPDATE"):
            statements.append(statement)

    event.listen(async_engine.sync_engine, "before_cursor_execute", record)
    yield statements
    event.remove(async_engine.sync_engine, "before_cursor_execute", record)


@pytest.fixture
def mail_sender() -> AsyncMock:
    return AsyncMock(spec=MailSender)


async def test__get_profile_view__projects_username_email_files(
    db_session: AsyncSession, user: User,
) -> None:
    view = await profile_service.get_profile_view(db_session, user.id)

    dumped = view.model_dump(mode="json", by_alias=True)
    assert set(dumped) == {"username", "email", "filesUploaded"}
    assert dumped["filesUploaded"][0]["filename"] == "report.pdf"


async def test__get_profile_view__missing_user_raises(db_session: AsyncSession) -> None:
    with pytest.raises(UserNotFoundError):
        await profile_service.get_profile_view(db_session, 999)


async def test__update_profile__username_only_issues_one_update(
    db_session: AsyncSession,
    user: User,
    update_statements: list[str],
    mail_sender: AsyncMock,
) -> None:
    result = await profile_service.update_profile(
        db_session,
        to_current_user(user),
        ProfileUpdateQuery(username="alice_w"),
        mail_sender=mail_sender,
        verification_url=VERIFY_URL,
    )

    assert len(update_statements) == 1
    assert result.updated_fields == ("username",)
    assert result.email_changed is False
    assert result.user.username == "alice_w"
    mail_sender.send_email.assert_not_awaited()


async def test__update_profile__returns_new_identity_without_mutating_input(
    db_session: AsyncSession, user: User, mail_sender: AsyncMock,
) -> None:
    before = to_current_user(user)

    result = await profile_service.update_profile(
        db_session,
        before,
        ProfileUpdateQuery(username="alice_w"),
        mail_sender=mail_sender,
        verification_url=VERIFY_URL,
    )

    assert before.username == "alice"
    assert result.user == CurrentUser(
        id=before.id, username="alice_w", email=before.email, verified=True,
    )


async def test__update_profile__applies_fields_in_order(
    db_session: AsyncSession,
    user: User,
    update_statements: list[str],
    mail_sender: AsyncMock,
) -> None:
    result = await profile_service.update_profile(
        db_session,
        to_current_user(user),
        ProfileUpdateQuery(username="alice2", password="new-password-1", email="a2@example.com"),
        mail_sender=mail_sender,
        verification_url=VERIFY_URL,
    )

    assert result.updated_fields == ("username", "password", "email")
    assert len(update_statements) == 3
    assert "username" in update_statements[0]
    assert "password" in update_statements[1]
    assert "email" in update_statements[2]


async def test__update_profile__email_change_sends_link_with_token(
    db_session: AsyncSession, user: User, mail_sender: AsyncMock,
) -> None:
    result = await profile_service.update_profile(
        db_session,
        to_current_user(user),
        ProfileUpdateQuery(email="new@x.com"),
        mail_sender=mail_sender,
        verification_url=VERIFY_URL,
    )

    assert result.email_changed is True
    assert result.verification_token
    assert result.user.verified is False
    mail_sender.send_email.assert_awaited_once_with(
        to="new@x.com",
        body=f"Click this link to verify your account: {VERIFY_URL}?token={result.verification_token}",
        subject="Verify Account",
    )

    stored = await db_session.get(User, user.id, populate_existing=True)
    assert stored.token == result.verification_token
    assert stored.verified is False


async def test__update_profile__refreshes_auth_cache_after_each_write(
    db_session: AsyncSession, user: User, mail_sender: AsyncMock,
) -> None:
    cache = AuthCache(InMemoryRedis())

    await profile_service.update_profile(
        db_session,
        to_current_user(user),
        ProfileUpdateQuery(username="alice_w", email="new@x.com"),
        mail_sender=mail_sender,
        verification_url=VERIFY_URL,
        auth_cache=cache,
    )

    cached = await cache.get_by_user_id(user.id)
    assert cached is not None
    assert cached.username == "alice_w"
    assert cached.email == "new@x.com"
    assert cached.verified is False


async def test__update_profile__password_failure_leaves_username_committed(
    db_session: AsyncSession, user: User, mail_sender: AsyncMock,
) -> None:
    user_id = user.id
    current = to_current_user(user)

    with (
        patch.object(profile_service, "hash_password", side_effect=RuntimeError("boom")),
        pytest.raises(RuntimeError),
    ):
        await profile_service.update_profile(
            db_session,
            current,
            ProfileUpdateQuery(username="alice_w", password="new-password-1"),
            mail_sender=mail_sender,
            verification_url=VERIFY_URL,
        )

    await db_session.rollback()
    stored = await db_session.get(User, user_id, populate_existing=True)
    assert stored.username == "alice_w"
    assert verify_password("correct-horse-battery", stored.password)


async def test__update_profile__missing_user_raises(
    db_session: AsyncSession, mail_sender: AsyncMock,
) -> None:
    ghost = CurrentUser(id=999, username="ghost", email="ghost@example.com", verified=True)
    with pytest.raises(UserNotFoundError):
        await profile_service.update_profile(
            db_session,
            ghost,
            ProfileUpdateQuery(username="ghost2"),
            mail_sender=mail_sender,
            verification_url=VERIFY_URL,
        )


async def test__verify_email__consumes_token(db_session: AsyncSession, user: User) -> None:
    user.verified = False
    user.token = "a" * 32
    await db_session.commit()

    verified = await profile_service.verify_email(db_session, "a" * 32)

    assert verified.verified is True
    assert user.token is None
    with pytest.raises(InvalidVerificationTokenError):
        await profile_service.verify_email(db_session, "a" * 32)
