from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from reflet.db.base import Base


class PageSetting(Base):
    """Navigation entry of a public page; hidden pages drop out of the header."""

    __tablename__ = "page_settings"

    id: Mapped[int] = mapped_column(primary_key=True)
    page_key: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    page_label: Mapped[str] = mapped_column(String(128))
    nav_label: Mapped[str] = mapped_column(String(64))
    href: Mapped[str] = mapped_column(String(255))
    is_visible: Mapped[bool] = mapped_column(Boolean, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
