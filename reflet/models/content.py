# reflet/models/content.py
# Sparse content overrides: one row per (page, section, content_key)
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from reflet.db.base import Base

VISIBILITY_KEY = "_visible"


class SiteContent(Base):
    __tablename__ = "site_content"

    id: Mapped[int] = mapped_column(primary_key=True)
    page: Mapped[str] = mapped_column(String(64))
    section: Mapped[str] = mapped_column(String(64))
    content_key: Mapped[str] = mapped_column(String(128))
    content_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # mirrors the schema field kind: "text" | "rich_text" | "image", or "system" for sentinels
    content_type: Mapped[str] = mapped_column(String(32), default="text")

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("page", "section", "content_key", name="uq_site_content_page_section_key"),
        Index("ix_site_content_page", "page"),
    )

    def __repr__(self) -> str:
        return f"<SiteContent {self.page}/{self.section}/{self.content_key}>"
