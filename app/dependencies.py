"""
FastAPI dependencies that assemble the service layer for one request.

Services are never module-level singletons: each request gets fresh
instances bound to its own ``AsyncSession`` (from ``get_db``), while the
cache manager is shared process-wide through ``app.state``.  FastAPI
resolves ``get_db`` once per request, so both services share the same
transaction.
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import CacheManager
from app.database import get_db
from app.repositories import AccountRepository, MessageRepository
from app.services.account_service import AccountService
from app.services.message_service import MessageService


def get_cache(request: Request) -> CacheManager:
    return request.app.state.cache


def get_account_service(db: AsyncSession = Depends(get_db)) -> AccountService:
    return AccountService(AccountRepository(db))


def get_message_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
) -> MessageService:
    return MessageService(MessageRepository(db), cache)
