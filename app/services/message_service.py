"""
Message service - CRUD, text validation and ownership for Message records.

Design notes
------------
- ``find_message`` returns a ``Lookup`` so callers choose whether an
  absent message is an error; ``get_message_by_id`` is the strict variant
  and raises ``NotFoundError``.
- Text is validated before any write, so a rejected create or update
  leaves the stored state untouched.
- The two list views are read through the cache; every write
  invalidates them.
"""
import logging

from app.cache import CacheManager
from app.config import settings
from app.errors import NotFoundError, UnauthorizedError, ValidationError
from app.repositories import MessageRepository
from app.schemas import Account, Message, MessageUpdate
from app.services import storage_errors
from app.services.lookup import Lookup

logger = logging.getLogger(__name__)


def validate_message(message: Message) -> None:
    """Reject text whose trimmed length falls outside [1, MESSAGE_MAX_LENGTH]."""
    text = message.message_text.strip()
    if not text:
        raise ValidationError("Message text cannot be empty")
    if len(text) > settings.MESSAGE_MAX_LENGTH:
        raise ValidationError(
            f"Message text cannot exceed {settings.MESSAGE_MAX_LENGTH} characters"
        )


def check_ownership(account: Account, message: Message) -> None:
    """Raise UnauthorizedError unless *account* is the one that posted *message*."""
    if account.account_id != message.posted_by:
        raise UnauthorizedError("Account is not allowed to modify this message")


class MessageService:
    def __init__(self, messages: MessageRepository, cache: CacheManager | None = None) -> None:
        self.messages = messages
        self.cache = cache

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def find_message(self, message_id: int) -> Lookup[Message]:
        with storage_errors("fetching message"):
            return Lookup(await self.messages.get_by_id(message_id))

    async def get_message_by_id(self, message_id: int) -> Message:
        lookup = await self.find_message(message_id)
        return lookup.or_raise(NotFoundError(f"Message {message_id} not found"))

    async def get_all_messages(self) -> list[Message]:
        return await self._cached_list(CacheManager.all_messages_key(), self.messages.get_all)

    async def get_messages_by_account_id(self, account_id: int) -> list[Message]:
        return await self._cached_list(
            CacheManager.account_messages_key(account_id),
            lambda: self.messages.find_by_owner(account_id),
        )

    async def _cached_list(self, key: str, load) -> list[Message]:
        if self.cache is not None:
            cached = await self.cache.get(key)
            if cached is not None:
                return [Message.model_validate(m) for m in cached]

        with storage_errors("fetching messages"):
            messages = await load()

        if self.cache is not None:
            await self.cache.set(
                key, [m.model_dump() for m in messages], ttl=settings.CACHE_TTL_LIST
            )
        return messages

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_message(self, message: Message, owner: Account | None) -> Message:
        """
        Persist *message* on behalf of *owner*, the account the caller
        resolved from ``message.posted_by``.
        """
        if owner is None:
            raise NotFoundError("Account must exist to post a message")
        validate_message(message)
        check_ownership(owner, message)

        with storage_errors("creating message"):
            created = await self.messages.insert(message)

        logger.info("Created message_id=%d for account_id=%d", created.message_id, owner.account_id)
        await self._invalidate()
        return created

    async def update_message(self, message_id: int, data: MessageUpdate) -> Message:
        """
        Replace the text of message *message_id* and return the result.

        Only the text changes; owner and timestamp are kept from the
        stored record.
        """
        existing = await self.get_message_by_id(message_id)
        updated = existing.model_copy(update={"message_text": data.message_text})
        validate_message(updated)

        with storage_errors("updating message"):
            if not await self.messages.update(updated):
                raise NotFoundError(f"Message {message_id} not found")

        logger.info("Updated message_id=%d", message_id)
        await self._invalidate()
        return updated

    async def delete_message(self, message: Message) -> None:
        with storage_errors("deleting message"):
            deleted = await self.messages.delete(message)
        if not deleted:
            raise NotFoundError(f"Message {message.message_id} not found")

        logger.info("Deleted message_id=%d", message.message_id)
        await self._invalidate()

    async def _invalidate(self) -> None:
        if self.cache is not None:
            await self.cache.invalidate_messages()
