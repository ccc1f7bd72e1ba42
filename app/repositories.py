"""
Persistence provider for the Account and Message records.

Repositories wrap a request-scoped ``AsyncSession`` and only ever hand
out immutable pydantic copies of the rows they load, never the ORM
instances themselves.  Every SQLAlchemy failure is re-raised as a
``RepositoryError`` with the driver exception chained as its cause.

Writes flush but do not commit; the transaction boundary belongs to
the ``get_db`` dependency.
"""
from contextlib import contextmanager

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import AccountRow, MessageRow
from app.schemas import Account, AccountCredentials, Message


class RepositoryError(Exception):
    """The store could not complete an operation."""


class ConstraintViolationError(RepositoryError):
    """The store rejected a write on one of its integrity constraints."""


@contextmanager
def _wrap_errors(action: str):
    try:
        yield
    except SQLAlchemyError as exc:
        raise RepositoryError(f"Error {action}") from exc


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------

class AccountRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_id(self, account_id: int) -> Account | None:
        with _wrap_errors(f"retrieving account {account_id}"):
            row = await self.db.get(AccountRow, account_id)
        return Account.model_validate(row) if row is not None else None

    async def get_all(self) -> list[Account]:
        with _wrap_errors("retrieving all accounts"):
            result = await self.db.execute(select(AccountRow).order_by(AccountRow.account_id))
            rows = result.scalars().all()
        return [Account.model_validate(r) for r in rows]

    async def find_by_username(self, username: str) -> Account | None:
        with _wrap_errors(f"finding account {username!r}"):
            result = await self.db.execute(
                select(AccountRow).where(AccountRow.username == username)
            )
            row = result.scalar_one_or_none()
        return Account.model_validate(row) if row is not None else None

    async def username_exists(self, username: str) -> bool:
        return await self.find_by_username(username) is not None

    async def insert(self, credentials: AccountCredentials) -> Account:
        """
        Insert a new account and return it with its assigned identity.

        A unique-constraint rejection rolls the session back and raises
        ``ConstraintViolationError``.
        """
        row = AccountRow(username=credentials.username, password=credentials.password)
        with _wrap_errors("inserting account"):
            self.db.add(row)
            try:
                await self.db.flush()
            except IntegrityError as exc:
                await self.db.rollback()
                raise ConstraintViolationError("Account violates a unique constraint") from exc
        if row.account_id is None:
            raise RepositoryError("Failed to insert account, identity not generated")
        return Account.model_validate(row)

    async def update(self, account: Account) -> bool:
        with _wrap_errors(f"updating account {account.account_id}"):
            result = await self.db.execute(
                update(AccountRow)
                .where(AccountRow.account_id == account.account_id)
                .values(username=account.username, password=account.password)
            )
        return result.rowcount > 0

    async def delete(self, account: Account) -> bool:
        with _wrap_errors(f"deleting account {account.account_id}"):
            result = await self.db.execute(
                delete(AccountRow).where(AccountRow.account_id == account.account_id)
            )
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Message
# ---------------------------------------------------------------------------

class MessageRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_id(self, message_id: int) -> Message | None:
        with _wrap_errors(f"retrieving message {message_id}"):
            row = await self.db.get(MessageRow, message_id)
        return Message.model_validate(row) if row is not None else None

    async def get_all(self) -> list[Message]:
        with _wrap_errors("retrieving all messages"):
            result = await self.db.execute(select(MessageRow).order_by(MessageRow.message_id))
            rows = result.scalars().all()
        return [Message.model_validate(r) for r in rows]

    async def find_by_owner(self, account_id: int) -> list[Message]:
        with _wrap_errors(f"retrieving messages of account {account_id}"):
            result = await self.db.execute(
                select(MessageRow)
                .where(MessageRow.posted_by == account_id)
                .order_by(MessageRow.message_id)
            )
            rows = result.scalars().all()
        return [Message.model_validate(r) for r in rows]

    async def insert(self, message: Message) -> Message:
        row = MessageRow(
            posted_by=message.posted_by,
            message_text=message.message_text,
            time_posted_epoch=message.time_posted_epoch,
        )
        with _wrap_errors("inserting message"):
            self.db.add(row)
            try:
                await self.db.flush()
            except IntegrityError as exc:
                await self.db.rollback()
                raise ConstraintViolationError("Message violates an integrity constraint") from exc
        if row.message_id is None:
            raise RepositoryError("Failed to insert message, identity not generated")
        return Message.model_validate(row)

    async def update(self, message: Message) -> bool:
        with _wrap_errors(f"updating message {message.message_id}"):
            result = await self.db.execute(
                update(MessageRow)
                .where(MessageRow.message_id == message.message_id)
                .values(
                    posted_by=message.posted_by,
                    message_text=message.message_text,
                    time_posted_epoch=message.time_posted_epoch,
                )
            )
        return result.rowcount > 0

    async def delete(self, message: Message) -> bool:
        with _wrap_errors(f"deleting message {message.message_id}"):
            result = await self.db.execute(
                delete(MessageRow).where(MessageRow.message_id == message.message_id)
            )
        return result.rowcount > 0
