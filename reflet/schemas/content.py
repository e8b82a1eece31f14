# reflet/schemas/content.py
# Pydantic — requests/responses del store de contenido
from __future__ import annotations
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ContentType = Literal["text", "rich_text", "image", "system"]


# ---------- Overrides ----------
class ContentItemIn(BaseModel):
    page: str = Field(..., max_length=64)
    section: str = Field(..., max_length=64)
    content_key: str = Field(..., max_length=128)
    content_value: Optional[str] = None
    content_type: ContentType = "text"


class ContentItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    page: str
    section: str
    content_key: str
    content_value: Optional[str] = None
    content_type: str
    updated_at: Optional[datetime] = None


class BulkSaveIn(BaseModel):
    items: List[ContentItemIn] = Field(default_factory=list)


class BulkSaveOut(BaseModel):
    saved: int


class VisibilityIn(BaseModel):
    page: str = Field(..., max_length=64)
    section: str = Field(..., max_length=64)
    visible: bool


# ---------- Resolved page ----------
class PageContentOut(BaseModel):
    page: str
    degraded: bool = False  # True when the overrides could not be read
    overrides: List[ContentItemOut] = Field(default_factory=list)
    values: Dict[str, str] = Field(default_factory=dict)          # "section.key" -> resolved value
    visibility: Dict[str, bool] = Field(default_factory=dict)
