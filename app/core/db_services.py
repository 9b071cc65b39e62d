"""Database service for persisting generated study content."""

from __future__ import annotations

from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.db.schemas.generated import (
    ContentKind as DBContentKind,
    GeneratedItem,
    GeneratedSet,
)
from app.modules.generation.models import GenerationResult


class GeneratedSetStore(Protocol):
    """Anything that can durably save a successful generation."""

    async def save(self, user_id: int, result: GenerationResult) -> int: ...

    async def get(self, set_id: int, user_id: int) -> Optional[GeneratedSet]: ...


class GeneratedSetService:
    """SQLAlchemy-backed store; assigns durable ids to generated sets."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, user_id: int, result: GenerationResult) -> int:
        """Save the set and its ordered items in one transaction; return the set id."""
        db_set = GeneratedSet(
            user_id=user_id,
            kind=DBContentKind(result.content_kind.value),
            title=result.title,
            topic=result.topic,
            provider=result.provider_used,
            requested_count=result.requested_count,
            accepted_count=result.accepted_count,
            warnings=list(result.warnings),
        )
        self.session.add(db_set)
        await self.session.flush()

        for index, item in enumerate(result.items):
            self.session.add(
                GeneratedItem(
                    generated_set_id=db_set.id,
                    position=index + 1,
                    payload=item.model_dump(mode="json"),
                )
            )

        await self.session.commit()
        return db_set.id

    async def get(self, set_id: int, user_id: int) -> Optional[GeneratedSet]:
        result = await self.session.execute(
            select(GeneratedSet)
            .options(selectinload(GeneratedSet.items))
            .where(GeneratedSet.id == set_id, GeneratedSet.user_id == user_id)
        )
        return result.scalar_one_or_none()
