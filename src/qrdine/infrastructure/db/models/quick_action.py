from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, func, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from qrdine.infrastructure.db.models.menu import Base


class QuickActionModel(Base):
    __tablename__ = "quick_actions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    label_en: Mapped[str] = mapped_column(String(255), nullable=False)
    label_ar: Mapped[str] = mapped_column(String(255), nullable=False, server_default="")
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=true())


class QuickActionRequestModel(Base):
    __tablename__ = "quick_action_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    table_number: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    action_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("quick_actions.id", ondelete="SET NULL"),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, server_default="pending")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    action: Mapped[QuickActionModel | None] = relationship()
