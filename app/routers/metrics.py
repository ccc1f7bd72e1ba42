from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.cache import CacheManager
from app.database import get_db
from app.dependencies import get_cache
from app.models import AccountRow, MessageRow
from app.schemas import MetricsResponse

router = APIRouter(prefix="/metrics", tags=["metrics"])

@router.get("", response_model=MetricsResponse)
async def get_metrics(
    db: AsyncSession = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
):

    total_accounts = (await db.execute(select(func.count()).select_from(AccountRow))).scalar_one()

    total_messages = (await db.execute(select(func.count()).select_from(MessageRow))).scalar_one()

    avg_messages = total_messages / total_accounts if total_accounts > 0 else 0

    return MetricsResponse(
        total_accounts=total_accounts,
        total_messages=total_messages,
        avg_messages_per_account=round(avg_messages, 2),
        cache_info=cache.stats,
    )
