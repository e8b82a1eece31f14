# reflet/api/v1/endpoints/content.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from reflet.api.deps import get_current_user
from reflet.content_structure import PAGE_CONTENT_STRUCTURE, get_page
from reflet.core.errors import BulkSaveError, DataUnavailable
from reflet.db.session import get_db
from reflet.models.auth import User
from reflet.schemas.content import BulkSaveIn, BulkSaveOut, ContentItemOut, PageContentOut, VisibilityIn
from reflet.services import content_service

log = logging.getLogger(__name__)

router = APIRouter()


@router.get("/structure")
def content_structure():
    """Editable pages, their sections and fields (with defaults)."""
    return {key: page.to_dict() for key, page in PAGE_CONTENT_STRUCTURE.items()}


@router.get("/{page}", response_model=PageContentOut)
def page_content(page: str, db: Session = Depends(get_db)):
    """
    Overrides of one page plus every schema field resolved. Public and
    fail-soft: a failed read yields the defaults with degraded=True.
    """
    degraded = False
    try:
        overrides = content_service.fetch_overrides(db, page)
    except DataUnavailable as e:
        log.warning("content API serving defaults for %s: %s", page, e)
        db.rollback()
        overrides, degraded = [], True
    return PageContentOut(
        page=page,
        degraded=degraded,
        overrides=[ContentItemOut.model_validate(o) for o in overrides],
        values=content_service.editor_values(page, overrides),
        visibility=content_service.section_visibility(page, overrides),
    )


@router.put("/bulk", response_model=BulkSaveOut)
def bulk_save(
    body: BulkSaveIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    items = [item.model_dump() for item in body.items]
    try:
        saved = content_service.save_overrides_bulk(db, items)
    except BulkSaveError as e:
        raise HTTPException(
            status_code=503,
            detail={"message": e.message, "index": e.index, "saved": e.index},
        )
    log.info("bulk content save: %d items by %s", saved, user.email)
    return BulkSaveOut(saved=saved)


@router.post("/visibility", response_model=ContentItemOut)
def set_visibility(
    body: VisibilityIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    page_def = get_page(body.page)
    if page_def is None or body.section not in page_def.sections:
        raise HTTPException(status_code=404, detail="Unknown page/section")
    try:
        row = content_service.toggle_visibility(db, page=body.page, section=body.section, visible=body.visible)
    except DataUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message)
    return ContentItemOut.model_validate(row)
