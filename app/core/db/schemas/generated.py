from __future__ import annotations

from datetime import datetime
from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
    JSON,
    Enum,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
import enum

from app.core.db.base import Base


class ContentKind(enum.Enum):
    QUIZ = "quiz"
    FLASHCARDS = "flashcards"
    STUDY_SET = "study_set"


class GeneratedSet(Base):
    __tablename__ = "generated_sets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    # Users live in the account service; only the id is kept here
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    kind: Mapped[ContentKind] = mapped_column(Enum(ContentKind), nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    topic: Mapped[str] = mapped_column(Text, nullable=False)
    provider: Mapped[str] = mapped_column(String, nullable=False)
    requested_count: Mapped[int] = mapped_column(Integer, nullable=False)
    accepted_count: Mapped[int] = mapped_column(Integer, nullable=False)
    warnings: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    items: Mapped[list["GeneratedItem"]] = relationship(
        "GeneratedItem",
        back_populates="generated_set",
        cascade="all, delete-orphan",
        order_by="GeneratedItem.position",
    )


class GeneratedItem(Base):
    __tablename__ = "generated_items"
    __table_args__ = (
        UniqueConstraint(
            "generated_set_id",
            "position",
            name="uq_generated_set_position",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    generated_set_id: Mapped[int] = mapped_column(
        ForeignKey("generated_sets.id"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-based
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)

    generated_set: Mapped["GeneratedSet"] = relationship(
        "GeneratedSet", back_populates="items"
    )


__all__ = ["ContentKind", "GeneratedSet", "GeneratedItem"]
