# reflet/web/admin/router.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile as StarletteUploadFile

from reflet.content_structure import PAGE_CONTENT_STRUCTURE, get_page
from reflet.core.errors import DataUnavailable, RefletError
from reflet.db.session import get_db
from reflet.models.auth import User
from reflet.models.catalog import GALLERY_CATEGORIES, PRODUCT_CATEGORIES, GalleryImage, Product, Project
from reflet.schemas.catalog import GalleryImageIn, ProductIn, ProjectIn
from reflet.services import catalog_service, content_service, media_service, message_service
from reflet.services.auth_service import AuthContext
from reflet.services.catalog_service import NotFound
from reflet.services.page_settings_service import list_page_settings, set_page_visibility
from reflet.services.storage import StorageBackend, get_storage
from reflet.web.deps import flash, redirect, render, require_admin, require_admin_role

log = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", include_in_schema=False)

SAVED_MESSAGE = "Contenu enregistré !"


# --------------------------- Helpers ---------------------------
def _ctx(request: Request, auth: AuthContext, db: Session, active_tab: str, **extra: Any) -> Dict[str, Any]:
    try:
        unread = message_service.unread_count(db)
    except DataUnavailable:
        db.rollback()
        unread = 0
    ctx = {
        "auth": auth,
        "user": auth.user,
        "active_tab": active_tab,
        "unread_count": unread,
        "content_pages": PAGE_CONTENT_STRUCTURE,
    }
    ctx.update(extra)
    return ctx


def _validation_errors(e: ValidationError) -> List[str]:
    out = []
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", ()) if x != "body")
        msg = err.get("msg", "invalid")
        # "Value error, <message>" -> "<message>"
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        out.append(f"{loc}: {msg}" if loc else msg)
    return out


def _checkbox(form, name: str) -> bool:
    return form.get(name) in ("on", "true", "1", "yes")


def _has_file(value) -> bool:
    return isinstance(value, StarletteUploadFile) and bool(value.filename)


async def _maybe_upload(storage: StorageBackend, value, folder: str) -> Optional[str]:
    if not _has_file(value):
        return None
    data = await value.read()
    result = media_service.upload_image(storage, data, content_type=value.content_type, folder=folder)
    return result.url


@router.get("")
def admin_home(auth: AuthContext = Depends(require_admin)):
    first_page = next(iter(PAGE_CONTENT_STRUCTURE))
    return redirect(f"/admin/content/{first_page}")


# --------------------------- Content editor ---------------------------
@router.get("/content/{page}")
def content_editor(
    request: Request,
    page: str,
    section: Optional[str] = Query(default=None),
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    page_def = get_page(page)
    if page_def is None:
        raise HTTPException(status_code=404, detail="Page non trouvée")

    error = None
    try:
        overrides = content_service.fetch_overrides(db, page)
    except DataUnavailable as e:
        db.rollback()
        overrides = []
        error = e.message

    active_section = section if section in page_def.sections else next(iter(page_def.sections))
    ctx = _ctx(
        request, auth, db, "content",
        page_key=page,
        page_def=page_def,
        active_section=active_section,
        values=content_service.editor_values(page, overrides),
        visibility=content_service.section_visibility(page, overrides),
        load_error=error,
    )
    return render(request, "admin/content_editor.html", ctx)


@router.post("/content/{page}")
async def content_save(
    request: Request,
    page: str,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if get_page(page) is None:
        raise HTTPException(status_code=404, detail="Page non trouvée")
    form = await request.form()
    items = content_service.collect_bulk_items(page, {k: v for k, v in form.items() if isinstance(v, str)})
    section = form.get("_section") or ""
    try:
        saved = content_service.save_overrides_bulk(db, items)
    except DataUnavailable as e:
        flash(request, e.message, "error")
    else:
        log.info("content saved page=%s items=%d by %s", page, saved, auth.user.email)
        flash(request, SAVED_MESSAGE)
    target = f"/admin/content/{page}"
    if section:
        target += f"?section={section}"
    return redirect(target)


@router.post("/content/{page}/{section}/visibility")
def content_visibility(
    request: Request,
    page: str,
    section: str,
    visible: str = Form(default="false"),
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    page_def = get_page(page)
    if page_def is None or section not in page_def.sections:
        raise HTTPException(status_code=404, detail="Section non trouvée")
    is_visible = visible.lower() in ("true", "on", "1")
    try:
        content_service.toggle_visibility(db, page=page, section=section, visible=is_visible)
    except DataUnavailable as e:
        flash(request, e.message, "error")
    else:
        flash(request, "Section affichée" if is_visible else "Section masquée")
    return redirect(f"/admin/content/{page}?section={section}")


# --------------------------- Media ---------------------------
@router.get("/media")
def media_library(
    request: Request,
    folder: Optional[str] = Query(default=None),
    q: Optional[str] = Query(default=None),
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
):
    error = None
    try:
        files = media_service.list_media(storage, folder=folder or None, search=q)
    except RefletError as e:
        files, error = [], e.message
    ctx = _ctx(
        request, auth, db, "media",
        files=files,
        folders=media_service.known_folders(),
        active_folder=folder or "",
        q=q or "",
        load_error=error,
    )
    return render(request, "admin/media.html", ctx)


@router.get("/media/library.json")
def media_library_json(
    folder: Optional[str] = Query(default=None),
    q: Optional[str] = Query(default=None),
    auth: AuthContext = Depends(require_admin),
    storage: StorageBackend = Depends(get_storage),
):
    try:
        files = media_service.list_media(storage, folder=folder or None, search=q)
    except RefletError as e:
        return JSONResponse({"detail": e.message}, status_code=503)
    return {"files": [f.to_dict() for f in files]}


@router.post("/media/upload")
async def media_upload(
    request: Request,
    files: List[UploadFile] = File(...),
    folder: str = Form(default=media_service.DEFAULT_FOLDER),
    auth: AuthContext = Depends(require_admin),
    storage: StorageBackend = Depends(get_storage),
):
    uploaded = 0
    for f in files:
        data = await f.read()
        try:
            media_service.upload_image(storage, data, content_type=f.content_type, folder=folder)
            uploaded += 1
        except RefletError as e:
            # one bad file does not stop the rest of the batch
            flash(request, f"{f.filename}: {e.message}", "error")
    if uploaded:
        flash(request, f"{uploaded} image(s) téléchargée(s)")
    return redirect(f"/admin/media?folder={folder}")


@router.post("/media/delete")
def media_delete(
    request: Request,
    path: str = Form(...),
    folder: str = Form(default=""),
    auth: AuthContext = Depends(require_admin),
    storage: StorageBackend = Depends(get_storage),
):
    try:
        media_service.delete_media(storage, path)
    except RefletError as e:
        flash(request, e.message, "error")
    else:
        flash(request, "Image supprimée")
    return redirect(f"/admin/media?folder={folder}" if folder else "/admin/media")


# --------------------------- Messages ---------------------------
@router.get("/messages")
def messages_list(
    request: Request,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    error = None
    try:
        messages = message_service.list_messages(db)
    except DataUnavailable as e:
        db.rollback()
        messages, error = [], e.message
    ctx = _ctx(request, auth, db, "messages", messages=messages, load_error=error)
    return render(request, "admin/messages.html", ctx)


@router.post("/messages/{message_id}/read")
def messages_mark_read(
    request: Request,
    message_id: int,
    read: str = Form(default="true"),
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        if not message_service.mark_read(db, message_id, read.lower() in ("true", "on", "1")):
            flash(request, "Message introuvable", "error")
    except DataUnavailable as e:
        flash(request, e.message, "error")
    return redirect("/admin/messages")


@router.post("/messages/{message_id}/delete")
def messages_delete(
    request: Request,
    message_id: int,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        if message_service.delete_message(db, message_id):
            flash(request, "Message supprimé")
        else:
            flash(request, "Message introuvable", "error")
    except DataUnavailable as e:
        flash(request, e.message, "error")
    return redirect("/admin/messages")


# --------------------------- Page settings ---------------------------
@router.get("/pages")
def pages_list(
    request: Request,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    error = None
    try:
        pages = list_page_settings(db)
    except DataUnavailable as e:
        db.rollback()
        pages, error = [], e.message
    return render(request, "admin/pages.html", _ctx(request, auth, db, "pages", pages=pages, load_error=error))


@router.post("/pages/{setting_id}/visibility")
def pages_visibility(
    request: Request,
    setting_id: int,
    visible: str = Form(default="false"),
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        row = set_page_visibility(db, setting_id, visible.lower() in ("true", "on", "1"))
    except DataUnavailable as e:
        flash(request, e.message, "error")
        return redirect("/admin/pages")
    if row is None:
        flash(request, "Page introuvable", "error")
    else:
        flash(request, f"{row.nav_label}: {'visible' if row.is_visible else 'masquée'}")
    return redirect("/admin/pages")


# --------------------------- Users (admin role) ---------------------------
@router.get("/users")
def users_list(
    request: Request,
    auth: AuthContext = Depends(require_admin_role),
    db: Session = Depends(get_db),
):
    error = None
    try:
        users = list(db.scalars(select(User).order_by(User.email.asc())).all())
    except SQLAlchemyError as e:
        db.rollback()
        log.error("listing users failed: %s", e)
        users, error = [], "Impossible de charger les utilisateurs."
    return render(request, "admin/users.html", _ctx(request, auth, db, "users", users=users, load_error=error))


# --------------------------- Catalog (generic) ---------------------------
CATALOG = {
    "products": {
        "model": Product,
        "schema": ProductIn,
        "list": lambda db: catalog_service.list_products(db),
        "save": catalog_service.save_product,
        "delete": catalog_service.delete_product,
        "fields": ("name", "description", "price", "category", "image_url"),
        "checkboxes": ("in_stock",),
        "folder": "products",
        "title": "Produits",
        "categories": PRODUCT_CATEGORIES,
    },
    "gallery": {
        "model": GalleryImage,
        "schema": GalleryImageIn,
        "list": lambda db: catalog_service.list_gallery_images(db),
        "save": catalog_service.save_gallery_image,
        "delete": catalog_service.delete_gallery_image,
        "fields": ("title", "description", "image_url", "category"),
        "checkboxes": (),
        "folder": "gallery",
        "title": "Galerie",
        "categories": GALLERY_CATEGORIES,
    },
    "projects": {
        "model": Project,
        "schema": ProjectIn,
        "list": lambda db: catalog_service.list_projects(db),
        "save": catalog_service.save_project,
        "delete": catalog_service.delete_project,
        "fields": ("title", "date", "category", "description", "icon", "color", "image_url", "sort_order"),
        "checkboxes": ("is_active",),
        "folder": "content",
        "title": "Projets",
        "categories": (),
    },
}


def _catalog_or_404(kind: str) -> dict:
    kind_def = CATALOG.get(kind)
    if kind_def is None:
        raise HTTPException(status_code=404, detail="Not found")
    return kind_def


def _form_values(form, kind_def: dict) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for name in kind_def["fields"]:
        raw = form.get(name)
        if isinstance(raw, str):
            values[name] = raw.strip()
    if "price" in values:
        values["price"] = values["price"].replace(",", ".") or "0"
    if "sort_order" in values:
        values["sort_order"] = values["sort_order"] or "0"
    for name in kind_def["checkboxes"]:
        values[name] = _checkbox(form, name)
    return values


def _render_catalog_form(request, auth, db, kind, kind_def, item_id, values, errors, status_code=200):
    ctx = _ctx(
        request, auth, db, kind,
        kind=kind,
        kind_def=kind_def,
        item_id=item_id,
        values=values,
        errors=errors,
    )
    return render(request, f"admin/{kind}_form.html", ctx, status_code=status_code)


@router.get("/{kind}")
def catalog_list(
    request: Request,
    kind: str,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    kind_def = _catalog_or_404(kind)
    error = None
    try:
        items = kind_def["list"](db)
    except DataUnavailable as e:
        db.rollback()
        items, error = [], e.message
    ctx = _ctx(request, auth, db, kind, kind=kind, kind_def=kind_def, items=items, load_error=error)
    return render(request, f"admin/{kind}_list.html", ctx)


@router.get("/{kind}/new")
def catalog_new(
    request: Request,
    kind: str,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    kind_def = _catalog_or_404(kind)
    defaults: Dict[str, Any] = {}
    for name in kind_def["checkboxes"]:
        defaults[name] = True
    return _render_catalog_form(request, auth, db, kind, kind_def, None, defaults, [])


@router.get("/{kind}/{item_id}/edit")
def catalog_edit(
    request: Request,
    kind: str,
    item_id: int,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    kind_def = _catalog_or_404(kind)
    try:
        obj = catalog_service.get_or_404(db, kind_def["model"], item_id)
    except NotFound:
        raise HTTPException(status_code=404, detail="Not found")
    values = {name: getattr(obj, name) for name in kind_def["fields"] + kind_def["checkboxes"]}
    return _render_catalog_form(request, auth, db, kind, kind_def, item_id, values, [])


@router.post("/{kind}/save")
async def catalog_save(
    request: Request,
    kind: str,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
):
    kind_def = _catalog_or_404(kind)
    form = await request.form()
    raw_id = form.get("item_id")
    item_id = int(raw_id) if isinstance(raw_id, str) and raw_id.isdigit() else None
    values = _form_values(form, kind_def)

    try:
        uploaded_url = await _maybe_upload(storage, form.get("image_file"), kind_def["folder"])
    except RefletError as e:
        return _render_catalog_form(request, auth, db, kind, kind_def, item_id, values, [e.message], 400)
    if uploaded_url:
        values["image_url"] = uploaded_url

    try:
        data = kind_def["schema"](**values)
    except ValidationError as e:
        return _render_catalog_form(request, auth, db, kind, kind_def, item_id, values, _validation_errors(e), 400)

    try:
        kind_def["save"](db, data, item_id)
    except NotFound:
        raise HTTPException(status_code=404, detail="Not found")
    except DataUnavailable as e:
        return _render_catalog_form(request, auth, db, kind, kind_def, item_id, values, [e.message], 503)

    flash(request, "Enregistré")
    return redirect(f"/admin/{kind}")


@router.post("/{kind}/{item_id}/delete")
def catalog_delete(
    request: Request,
    kind: str,
    item_id: int,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    kind_def = _catalog_or_404(kind)
    try:
        kind_def["delete"](db, item_id)
    except NotFound:
        flash(request, "Élément introuvable", "error")
    except DataUnavailable as e:
        flash(request, e.message, "error")
    else:
        flash(request, "Supprimé")
    return redirect(f"/admin/{kind}")
