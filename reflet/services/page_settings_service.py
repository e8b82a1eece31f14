# reflet/services/page_settings_service.py
# Entradas de navegación pública (orden + visibilidad)
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from reflet.core.errors import DataUnavailable
from reflet.models.pages import PageSetting

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavEntry:
    page_key: str
    page_label: str
    nav_label: str
    href: str


DEFAULT_NAV: Sequence[NavEntry] = (
    NavEntry("accueil", "Accueil", "Accueil", "/"),
    NavEntry("moyens", "Nos Moyens", "Nos Moyens", "/moyens"),
    NavEntry("projets", "Projets", "Projets", "/projets"),
    NavEntry("restaurant", "Restaurant", "Restaurant", "/restaurant"),
    NavEntry("culture", "Culture", "Culture", "/culture"),
    NavEntry("cooperative", "Coopérative", "Coopérative", "/cooperative"),
    NavEntry("presidente", "La Présidente", "La Présidente", "/presidente"),
    NavEntry("contact", "Contact", "Contact", "/contact"),
)


def list_page_settings(db: Session) -> List[PageSetting]:
    try:
        return list(db.scalars(
            select(PageSetting).order_by(PageSetting.sort_order.asc(), PageSetting.id.asc())
        ).all())
    except SQLAlchemyError as e:
        raise DataUnavailable(str(e)) from e


def visible_pages(db: Session) -> List[PageSetting]:
    return [p for p in list_page_settings(db) if p.is_visible]


def header_nav(db: Session) -> List[NavEntry]:
    """
    Navigation for the public header. Falls back to the built-in list when
    the table is empty or cannot be read; never raises.
    """
    try:
        rows = list_page_settings(db)
    except DataUnavailable as e:
        log.warning("page settings unavailable, using default nav: %s", e)
        db.rollback()
        return list(DEFAULT_NAV)
    if not rows:
        return list(DEFAULT_NAV)
    return [NavEntry(p.page_key, p.page_label, p.nav_label, p.href) for p in rows if p.is_visible]


def set_page_visibility(db: Session, setting_id: int, visible: bool) -> PageSetting | None:
    row = db.get(PageSetting, setting_id)
    if row is None:
        return None
    row.is_visible = bool(visible)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise DataUnavailable(str(e)) from e
    return row


def seed_default_pages(db: Session) -> int:
    """Inserts the default nav entries that are missing. Idempotent."""
    existing = set(db.scalars(select(PageSetting.page_key)).all())
    created = 0
    for order, entry in enumerate(DEFAULT_NAV):
        if entry.page_key in existing:
            continue
        db.add(PageSetting(
            page_key=entry.page_key,
            page_label=entry.page_label,
            nav_label=entry.nav_label,
            href=entry.href,
            is_visible=True,
            sort_order=order,
        ))
        created += 1
    db.commit()
    return created
