# reflet/web/public/router.py
# Sitio público: cada vista carga su contenido (fail-soft) y renderiza un template
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response
from pydantic import ValidationError
from sqlalchemy.orm import Session

from reflet.core.errors import DataUnavailable
from reflet.db.session import get_db
from reflet.models.catalog import GALLERY_CATEGORIES, PRODUCT_CATEGORIES
from reflet.schemas.messages import CONTACT_SUBJECTS, ContactMessageIn
from reflet.services import catalog_service
from reflet.services.content_service import load_page_content
from reflet.services.message_service import submit_message
from reflet.services.page_settings_service import header_nav
from reflet.services.storage import InMemoryStorage, StorageBackend, get_storage
from reflet.web.deps import render

log = logging.getLogger(__name__)

router = APIRouter(include_in_schema=False)


def _page(request: Request, db: Session, template: str, page: Optional[str] = None, status_code: int = 200, **extra: Any):
    ctx: Dict[str, Any] = {
        "nav": header_nav(db),
        "current_path": request.url.path,
        "content": load_page_content(db, page) if page else None,
    }
    ctx.update(extra)
    return render(request, template, ctx, status_code=status_code)


def _safe_list(db: Session, fn, *args, **kwargs) -> list:
    # listings degrade to empty, the page still renders
    try:
        return fn(db, *args, **kwargs)
    except DataUnavailable as e:
        log.warning("catalog read failed (%s): %s", getattr(fn, "__name__", fn), e)
        db.rollback()
        return []


@router.get("/")
def home(request: Request, db: Session = Depends(get_db)):
    return _page(request, db, "public/index.html", "accueil")


@router.get("/moyens")
def moyens(request: Request, db: Session = Depends(get_db)):
    return _page(request, db, "public/moyens.html", "moyens")


@router.get("/cooperative")
def cooperative(request: Request, db: Session = Depends(get_db)):
    return _page(request, db, "public/cooperative.html", "cooperative")


@router.get("/culture")
def culture(request: Request, db: Session = Depends(get_db)):
    return _page(request, db, "public/culture.html", "culture")


@router.get("/restaurant")
def restaurant(request: Request, db: Session = Depends(get_db)):
    return _page(request, db, "public/restaurant.html")


@router.get("/projets")
def projets(request: Request, db: Session = Depends(get_db)):
    projects = _safe_list(db, catalog_service.list_projects, only_active=True)
    return _page(request, db, "public/projets.html", "projets", projects=projects)


@router.get("/boutique")
def boutique(request: Request, category: Optional[str] = Query(default=None), db: Session = Depends(get_db)):
    if category not in PRODUCT_CATEGORIES:
        category = None
    products = _safe_list(db, catalog_service.list_products, only_in_stock=True, category=category)
    return _page(
        request, db, "public/boutique.html", "boutique",
        products=products, categories=PRODUCT_CATEGORIES, active_category=category,
    )


@router.get("/galerie")
def galerie(request: Request, category: Optional[str] = Query(default=None), db: Session = Depends(get_db)):
    if category not in GALLERY_CATEGORIES:
        category = None
    images = _safe_list(db, catalog_service.list_gallery_images, category=category)
    return _page(
        request, db, "public/galerie.html", "galerie",
        images=images, categories=GALLERY_CATEGORIES, active_category=category,
    )


@router.get("/presidente")
def presidente(request: Request, db: Session = Depends(get_db)):
    return _page(request, db, "public/presidente.html", "presidente")


@router.get("/mentions-legales")
def mentions_legales(request: Request, db: Session = Depends(get_db)):
    return _page(request, db, "public/mentions_legales.html")


@router.get("/confidentialite")
def confidentialite(request: Request, db: Session = Depends(get_db)):
    return _page(request, db, "public/confidentialite.html")


# ---------- Contact ----------
@router.get("/contact")
def contact_get(request: Request, db: Session = Depends(get_db)):
    return _page(request, db, "public/contact.html", "contact", subjects=CONTACT_SUBJECTS, form={}, errors={})


@router.post("/contact")
async def contact_post(request: Request, db: Session = Depends(get_db)):
    raw = await request.form()
    form = {k: v for k, v in raw.items() if isinstance(v, str)}
    payload = {
        "first_name": form.get("first_name", ""),
        "name": form.get("name", ""),
        "email": form.get("email", ""),
        "phone": form.get("phone") or None,
        "subject": form.get("subject", ""),
        "message": form.get("message", ""),
        "consent": form.get("consent") in ("on", "true", "1"),
    }
    errors: Dict[str, str] = {}
    try:
        data = ContactMessageIn(**payload)
    except ValidationError as e:
        for err in e.errors():
            field = str(err["loc"][0]) if err.get("loc") else "form"
            msg = err.get("msg", "invalide")
            errors[field] = msg[len("Value error, "):] if msg.startswith("Value error, ") else msg
        data = None

    if data is not None:
        try:
            submit_message(db, data)
        except DataUnavailable as e:
            errors["form"] = e.message

    if errors:
        return _page(
            request, db, "public/contact.html", "contact", status_code=400,
            subjects=CONTACT_SUBJECTS, form=form, errors=errors,
        )
    return _page(request, db, "public/contact.html", "contact", subjects=CONTACT_SUBJECTS, sent=True, form={}, errors={})


# ---------- Local media (only when no bucket is configured) ----------
@router.get("/media/{path:path}")
def local_media(path: str, storage: StorageBackend = Depends(get_storage)):
    if not isinstance(storage, InMemoryStorage):
        raise HTTPException(status_code=404)
    obj = storage.get(path)
    if obj is None:
        raise HTTPException(status_code=404)
    return Response(
        content=obj["data"],
        media_type=str(obj["content_type"]),
        headers={"Cache-Control": f"max-age={obj['cache_control']}"},
    )
