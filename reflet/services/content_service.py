# reflet/services/content_service.py
# Overrides de contenido: lectura, resolución con fallback y escritura (bulk save)
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from reflet.content_structure import PAGE_CONTENT_STRUCTURE, default_for, iter_fields
from reflet.core.errors import BulkSaveError, DataUnavailable
from reflet.models.content import VISIBILITY_KEY, SiteContent

log = logging.getLogger(__name__)

SYSTEM_CONTENT_TYPE = "system"


# -------- Read path --------
def fetch_overrides(db: Session, page: str) -> List[SiteContent]:
    """
    All override rows of one page in a single query.
    Ordered by id so that, should duplicates ever exist, the oldest row wins.
    """
    try:
        rows = db.scalars(
            select(SiteContent).where(SiteContent.page == page).order_by(SiteContent.id.asc())
        ).all()
    except SQLAlchemyError as e:
        raise DataUnavailable(f"Lecture du contenu '{page}' impossible: {e}") from e
    return list(rows)


def resolve(overrides: Sequence[Any], section: str, key: str, fallback: Optional[str] = "") -> str:
    """
    Pure lookup: first row matching (section, key) in list order.
    Empty or NULL stored values count as "no override".
    """
    for row in overrides:
        if row.section == section and row.content_key == key:
            if row.content_value:
                return row.content_value
            break
    return fallback or ""


def resolve_visibility(overrides: Sequence[Any], section: str) -> bool:
    for row in overrides:
        if row.section == section and row.content_key == VISIBILITY_KEY:
            return row.content_value != "false"
    return True


class PageContent:
    """
    Per-request index of a page's overrides, read by the templates:

        {{ content.get("hero", "title") }}
        {% if content.visible("mission") %} ... {% endif %}
    """

    def __init__(self, page: str, overrides: Iterable[Any] = ()):
        self.page = page
        self._values: Dict[Tuple[str, str], Optional[str]] = {}
        for row in overrides:
            # first occurrence wins, same rule as resolve()
            self._values.setdefault((row.section, row.content_key), row.content_value)

    def __len__(self) -> int:
        return len(self._values)

    def get(self, section: str, key: str, fallback: Optional[str] = None) -> str:
        value = self._values.get((section, key))
        if value:
            return value
        if fallback is None:
            fallback = default_for(self.page, section, key)
        return fallback or ""

    def visible(self, section: str) -> bool:
        return self._values.get((section, VISIBILITY_KEY)) != "false"


def load_page_content(db: Session, page: str) -> PageContent:
    """Never blocks rendering: a failed read logs and yields compiled-in defaults."""
    try:
        return PageContent(page, fetch_overrides(db, page))
    except DataUnavailable as e:
        log.warning("content read failed for page=%s, using defaults: %s", page, e)
        try:
            db.rollback()
        except SQLAlchemyError:
            log.debug("rollback after failed content read also failed", exc_info=True)
        return PageContent(page)


# -------- Write path --------
def upsert_override(
    db: Session,
    *,
    page: str,
    section: str,
    key: str,
    value: Optional[str],
    content_type: str = "text",
) -> SiteContent:
    """
    Two round trips: look the triple up, then update it or insert it.
    Flushes but does not commit; the caller owns the transaction.
    """
    row = db.scalar(
        select(SiteContent).where(
            and_(
                SiteContent.page == page,
                SiteContent.section == section,
                SiteContent.content_key == key,
            )
        )
    )
    if row is not None:
        row.content_value = value
        row.content_type = content_type
    else:
        row = SiteContent(
            page=page,
            section=section,
            content_key=key,
            content_value=value,
            content_type=content_type,
        )
        db.add(row)
    db.flush()
    return row


def save_overrides_bulk(db: Session, items: Sequence[Mapping[str, Any]]) -> int:
    """
    Applies items one by one, committing each. Stops at the first failure:
    earlier items stay saved, later ones are not attempted.
    Returns the number of items saved.
    """
    for index, item in enumerate(items):
        try:
            upsert_override(
                db,
                page=item["page"],
                section=item["section"],
                key=item["content_key"],
                value=item.get("content_value"),
                content_type=item.get("content_type") or "text",
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            log.error(
                "bulk save stopped at item %d (%s/%s/%s): %s",
                index, item.get("page"), item.get("section"), item.get("content_key"), e,
            )
            raise BulkSaveError(index, item, e) from e
    return len(items)


def toggle_visibility(db: Session, *, page: str, section: str, visible: bool) -> SiteContent:
    try:
        row = upsert_override(
            db,
            page=page,
            section=section,
            key=VISIBILITY_KEY,
            value="true" if visible else "false",
            content_type=SYSTEM_CONTENT_TYPE,
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise DataUnavailable(f"Impossible de modifier la visibilité de '{page}/{section}': {e}") from e
    return row


# -------- Editor helpers --------
def form_field_name(section: str, key: str) -> str:
    return f"{section}.{key}"


def editor_values(page: str, overrides: Sequence[Any]) -> Dict[str, str]:
    """{"section.key": override or default} for every field of the page."""
    values: Dict[str, str] = {}
    for section_key, f in iter_fields(page):
        values[form_field_name(section_key, f.key)] = resolve(overrides, section_key, f.key, f.default_value)
    return values


def section_visibility(page: str, overrides: Sequence[Any]) -> Dict[str, bool]:
    page_def = PAGE_CONTENT_STRUCTURE.get(page)
    if page_def is None:
        return {}
    return {section_key: resolve_visibility(overrides, section_key) for section_key in page_def.sections}


def collect_bulk_items(page: str, form_values: Mapping[str, Any]) -> List[Dict[str, str]]:
    """
    Bulk items for every schema field submitted with a non-empty value.
    Empty submissions are skipped, so clearing a field in the form does not
    clear a stored override. Unknown form keys are ignored.
    """
    items: List[Dict[str, str]] = []
    for section_key, f in iter_fields(page):
        raw = form_values.get(form_field_name(section_key, f.key))
        if raw is None:
            continue
        value = str(raw)
        if value == "":
            continue
        items.append({
            "page": page,
            "section": section_key,
            "content_key": f.key,
            "content_value": value,
            "content_type": f.kind.value,
        })
    return items
