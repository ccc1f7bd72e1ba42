"""
Direct service-layer tests - business rules without HTTP in the way.

Services are built around real repositories on the test session, except
where a failing repository stands in to exercise storage-error wrapping.
"""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import (
    ConflictError,
    NotFoundError,
    StorageFailureError,
    UnauthorizedError,
    ValidationError,
)
from app.repositories import AccountRepository, ConstraintViolationError, MessageRepository, RepositoryError
from app.schemas import Account, AccountCredentials, Message, MessageUpdate
from app.security import passwords_match
from app.services.account_service import AccountService
from app.services.lookup import Lookup
from app.services.message_service import MessageService, validate_message


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _accounts(db: AsyncSession) -> AccountService:
    return AccountService(AccountRepository(db))


def _messages(db: AsyncSession) -> MessageService:
    return MessageService(MessageRepository(db))


def _message(text: str = "hello message", posted_by: int = 1) -> Message:
    return Message(posted_by=posted_by, message_text=text, time_posted_epoch=1669947792)


class FailingRepository:
    """Raises RepositoryError from every method, like a dead database."""

    def __getattr__(self, name):
        async def _fail(*args, **kwargs):
            raise RepositoryError("connection refused")
        return _fail


# ---------------------------------------------------------------------------
# account_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_account_assigns_identity(db_session: AsyncSession):
    account = await _accounts(db_session).create_account(
        AccountCredentials(username="user", password="password")
    )
    assert account == Account(account_id=2, username="user", password="password")


@pytest.mark.asyncio
async def test_create_account_duplicate_username(db_session: AsyncSession):
    with pytest.raises(ConflictError):
        await _accounts(db_session).create_account(
            AccountCredentials(username="testuser1", password="anything")
        )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "username, password, message",
    [
        ("", "", "Username"),
        ("  ", "pw", "Username"),
        ("user", "   ", "Password cannot be blank"),
        ("user", "abc", "at least 4"),
        # Validation runs before the duplicate check.
        ("testuser1", "abc", "at least 4"),
    ],
)
async def test_create_account_validation_order(
    db_session: AsyncSession, username: str, password: str, message: str
):
    with pytest.raises(ValidationError, match=message):
        await _accounts(db_session).create_account(
            AccountCredentials(username=username, password=password)
        )


@pytest.mark.asyncio
async def test_create_account_constraint_violation_is_conflict(db_session: AsyncSession):
    """A store-level unique rejection reports the same conflict as the pre-check."""

    class RacingRepository(AccountRepository):
        async def username_exists(self, username: str) -> bool:
            return False

    service = AccountService(RacingRepository(db_session))
    with pytest.raises(ConflictError) as excinfo:
        await service.create_account(AccountCredentials(username="testuser1", password="password"))
    assert isinstance(excinfo.value.__cause__, ConstraintViolationError)


@pytest.mark.asyncio
async def test_validate_login(db_session: AsyncSession):
    service = _accounts(db_session)
    account = await service.validate_login(AccountCredentials(username="testuser1", password="password"))
    assert account is not None
    assert account.account_id == 1

    assert await service.validate_login(AccountCredentials(username="testuser1", password="Password")) is None
    assert await service.validate_login(AccountCredentials(username="nobody", password="password")) is None


@pytest.mark.asyncio
async def test_account_lookups(db_session: AsyncSession):
    service = _accounts(db_session)
    assert (await service.get_account_by_id(1)).username == "testuser1"
    assert await service.get_account_by_id(42) is None
    assert (await service.find_account_by_username("testuser1")).account_id == 1
    assert await service.account_exists(1) is True
    assert await service.account_exists(42) is False
    assert [a.username for a in await service.get_all_accounts()] == ["testuser1"]


@pytest.mark.asyncio
async def test_update_account(db_session: AsyncSession):
    service = _accounts(db_session)
    assert await service.update_account(Account(account_id=1, username="renamed", password="password"))
    assert (await service.get_account_by_id(1)).username == "renamed"
    assert not await service.update_account(Account(account_id=9, username="x", password="xxxx"))


@pytest.mark.asyncio
async def test_delete_account_requires_identity(db_session: AsyncSession):
    service = AccountService(FailingRepository())
    with pytest.raises(ValidationError):
        await service.delete_account(Account(account_id=0, username="x", password="xxxx"))


@pytest.mark.asyncio
async def test_delete_account(db_session: AsyncSession):
    service = _accounts(db_session)
    created = await service.create_account(AccountCredentials(username="gone", password="password"))
    assert await service.delete_account(created) is True
    assert await service.delete_account(created) is False


@pytest.mark.asyncio
async def test_account_storage_failure_is_wrapped():
    service = AccountService(FailingRepository())
    with pytest.raises(StorageFailureError) as excinfo:
        await service.get_account_by_id(1)
    assert isinstance(excinfo.value.__cause__, RepositoryError)

    with pytest.raises(StorageFailureError):
        await service.create_account(AccountCredentials(username="user", password="password"))


# ---------------------------------------------------------------------------
# message_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_message(db_session: AsyncSession):
    owner = await _accounts(db_session).get_account_by_id(1)
    created = await _messages(db_session).create_message(_message(), owner)
    assert created == Message(
        message_id=2, posted_by=1, message_text="hello message", time_posted_epoch=1669947792
    )


@pytest.mark.asyncio
async def test_create_message_requires_owner(db_session: AsyncSession):
    with pytest.raises(NotFoundError):
        await _messages(db_session).create_message(_message(), None)


@pytest.mark.asyncio
async def test_create_message_owner_mismatch(db_session: AsyncSession):
    accounts = _accounts(db_session)
    other = await accounts.create_account(AccountCredentials(username="other", password="password"))
    with pytest.raises(UnauthorizedError):
        await _messages(db_session).create_message(_message(posted_by=1), other)


@pytest.mark.asyncio
async def test_create_message_validates_before_ownership(db_session: AsyncSession):
    other = Account(account_id=7, username="other", password="password")
    with pytest.raises(ValidationError):
        await _messages(db_session).create_message(_message(text=""), other)


@pytest.mark.parametrize(
    "text, valid",
    [("a", True), ("a" * 254, True), ("  " + "a" * 254 + "  ", True), ("", False), ("   ", False), ("a" * 255, False)],
)
def test_validate_message_bounds(text: str, valid: bool):
    if valid:
        validate_message(_message(text=text))
    else:
        with pytest.raises(ValidationError):
            validate_message(_message(text=text))


@pytest.mark.asyncio
async def test_find_and_get_message(db_session: AsyncSession):
    service = _messages(db_session)
    lookup = await service.find_message(1)
    assert lookup.found
    assert (await service.get_message_by_id(1)) == lookup.value

    missing = await service.find_message(99)
    assert not missing.found
    with pytest.raises(NotFoundError):
        await service.get_message_by_id(99)


@pytest.mark.asyncio
async def test_message_lists(db_session: AsyncSession):
    service = _messages(db_session)
    owner = await _accounts(db_session).get_account_by_id(1)
    await service.create_message(_message("second"), owner)

    assert [m.message_id for m in await service.get_all_messages()] == [1, 2]
    assert len(await service.get_messages_by_account_id(1)) == 2
    assert await service.get_messages_by_account_id(5) == []


@pytest.mark.asyncio
async def test_update_message_keeps_owner_and_timestamp(db_session: AsyncSession):
    service = _messages(db_session)
    updated = await service.update_message(1, MessageUpdate(message_text="updated message"))
    assert updated == Message(
        message_id=1, posted_by=1, message_text="updated message", time_posted_epoch=1669947792
    )
    assert (await service.get_message_by_id(1)).message_text == "updated message"


@pytest.mark.asyncio
async def test_update_message_invalid_text_leaves_record(db_session: AsyncSession):
    service = _messages(db_session)
    with pytest.raises(ValidationError):
        await service.update_message(1, MessageUpdate(message_text="a" * 255))
    assert (await service.get_message_by_id(1)).message_text == "test message 1"


@pytest.mark.asyncio
async def test_update_missing_message(db_session: AsyncSession):
    with pytest.raises(NotFoundError):
        await _messages(db_session).update_message(99, MessageUpdate(message_text="hi"))


@pytest.mark.asyncio
async def test_delete_message(db_session: AsyncSession):
    service = _messages(db_session)
    message = await service.get_message_by_id(1)
    await service.delete_message(message)
    assert not (await service.find_message(1)).found


@pytest.mark.asyncio
async def test_delete_missing_message_is_not_found(db_session: AsyncSession):
    """Deleting an unknown identity reports NotFound, not a storage failure."""
    with pytest.raises(NotFoundError):
        await _messages(db_session).delete_message(_message().model_copy(update={"message_id": 99}))


@pytest.mark.asyncio
async def test_message_storage_failure_is_wrapped():
    service = MessageService(FailingRepository())
    with pytest.raises(StorageFailureError):
        await service.get_all_messages()
    with pytest.raises(StorageFailureError):
        await service.find_message(1)


@pytest.mark.asyncio
async def test_records_are_copies(db_session: AsyncSession):
    """Mutating a returned record is impossible; updates produce new copies."""
    service = _messages(db_session)
    message = await service.get_message_by_id(1)
    with pytest.raises(Exception):
        message.message_text = "tampered"
    assert (await service.get_message_by_id(1)).message_text == "test message 1"


# ---------------------------------------------------------------------------
# Helpers under the services
# ---------------------------------------------------------------------------

def test_lookup():
    assert Lookup(3).or_raise(KeyError()) == 3
    assert Lookup().or_none() is None
    with pytest.raises(KeyError):
        Lookup().or_raise(KeyError("missing"))


def test_passwords_match():
    assert passwords_match("password", "password")
    assert not passwords_match("password", "password ")
    assert not passwords_match("password", "")


def test_message_text_column_is_unbounded():
    """Padded text within the trimmed limit must fit the column as stored."""
    from sqlalchemy import Text

    from app.models import MessageRow

    assert isinstance(MessageRow.__table__.c.message_text.type, Text)


def test_rows_carry_no_orm_relationships():
    """Repositories only load plain rows; no relationship loaders are mapped."""
    from sqlalchemy import inspect

    from app.models import AccountRow, MessageRow

    assert not inspect(AccountRow).relationships
    assert not inspect(MessageRow).relationships
