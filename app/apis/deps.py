from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.base import get_session
from app.core.db_services import GeneratedSetService, GeneratedSetStore
from app.modules.generation.service import GenerationService


async def current_user_id(
    x_user_id: Optional[str] = Header(default=None),
) -> int:
    """Resolve the caller from the gateway-provided ``X-User-Id`` header.

    Authentication happens upstream; requests reaching this service are
    trusted, so only the presence and shape of the id are checked.
    """
    if not x_user_id or not x_user_id.strip().isdigit():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return int(x_user_id.strip())


@lru_cache(maxsize=1)
def get_generation_service() -> GenerationService:
    """Process-wide service so every request shares one rotation counter."""
    return GenerationService.from_settings()


async def get_generated_set_store(
    session: AsyncSession = Depends(get_session),
) -> GeneratedSetStore:
    return GeneratedSetService(session)
