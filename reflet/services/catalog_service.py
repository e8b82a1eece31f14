# reflet/services/catalog_service.py
# Productos de la boutique, imágenes de galería y proyectos
from __future__ import annotations

import logging
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from reflet.core.errors import DataUnavailable, RefletError
from reflet.db.base import Base
from reflet.models.catalog import GalleryImage, Product, Project
from reflet.schemas.catalog import GalleryImageIn, ProductIn, ProjectIn

log = logging.getLogger(__name__)

M = TypeVar("M", bound=Base)


class NotFound(RefletError):
    pass


# -------- Helpers genéricos --------
def _query(db: Session, stmt) -> list:
    try:
        return list(db.scalars(stmt).all())
    except SQLAlchemyError as e:
        raise DataUnavailable(str(e)) from e


def _save(db: Session, model: Type[M], data: BaseModel, obj_id: Optional[int]) -> M:
    try:
        if obj_id is None:
            obj = model(**data.model_dump())
            db.add(obj)
        else:
            obj = db.get(model, obj_id)
            if obj is None:
                raise NotFound(f"{model.__name__} {obj_id} introuvable")
            for k, v in data.model_dump().items():
                setattr(obj, k, v)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.error("saving %s id=%s failed: %s", model.__name__, obj_id, e)
        raise DataUnavailable(str(e)) from e
    db.refresh(obj)
    return obj


def _delete(db: Session, model: Type[M], obj_id: int) -> None:
    try:
        obj = db.get(model, obj_id)
        if obj is None:
            raise NotFound(f"{model.__name__} {obj_id} introuvable")
        db.delete(obj)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.error("deleting %s id=%s failed: %s", model.__name__, obj_id, e)
        raise DataUnavailable(str(e)) from e


def get_or_404(db: Session, model: Type[M], obj_id: int) -> M:
    obj = db.get(model, obj_id)
    if obj is None:
        raise NotFound(f"{model.__name__} {obj_id} introuvable")
    return obj


# -------- Products --------
def list_products(db: Session, *, only_in_stock: bool = False, category: Optional[str] = None) -> List[Product]:
    stmt = select(Product)
    if only_in_stock:
        stmt = stmt.where(Product.in_stock.is_(True))
    if category:
        stmt = stmt.where(Product.category == category)
    return _query(db, stmt.order_by(Product.created_at.desc(), Product.id.desc()))


def save_product(db: Session, data: ProductIn, product_id: Optional[int] = None) -> Product:
    return _save(db, Product, data, product_id)


def delete_product(db: Session, product_id: int) -> None:
    _delete(db, Product, product_id)


# -------- Gallery --------
def list_gallery_images(db: Session, *, category: Optional[str] = None) -> List[GalleryImage]:
    stmt = select(GalleryImage)
    if category:
        stmt = stmt.where(GalleryImage.category == category)
    return _query(db, stmt.order_by(GalleryImage.created_at.desc(), GalleryImage.id.desc()))


def save_gallery_image(db: Session, data: GalleryImageIn, image_id: Optional[int] = None) -> GalleryImage:
    return _save(db, GalleryImage, data, image_id)


def delete_gallery_image(db: Session, image_id: int) -> None:
    _delete(db, GalleryImage, image_id)


# -------- Projects --------
def list_projects(db: Session, *, only_active: bool = False) -> List[Project]:
    stmt = select(Project)
    if only_active:
        stmt = stmt.where(Project.is_active.is_(True))
    return _query(db, stmt.order_by(Project.sort_order.asc(), Project.id.asc()))


def save_project(db: Session, data: ProjectIn, project_id: Optional[int] = None) -> Project:
    return _save(db, Project, data, project_id)


def delete_project(db: Session, project_id: int) -> None:
    _delete(db, Project, project_id)
