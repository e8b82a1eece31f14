# reflet/services/media_service.py
from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from reflet.core.errors import DataUnavailable, RefletError
from reflet.core.settings import settings
from reflet.services import image_pipeline
from reflet.services.storage import StorageBackend, StoredObject

log = logging.getLogger(__name__)

DEFAULT_FOLDER = "content"
THUMBS_DIR = "thumbs"
LIST_LIMIT = 200


@dataclass(frozen=True)
class UploadResult:
    path: str
    url: str
    size: int
    content_type: str
    thumbnail_path: Optional[str] = None
    thumbnail_url: Optional[str] = None


@dataclass(frozen=True)
class MediaItem:
    name: str
    id: Optional[str]
    created_at: Optional[datetime]
    size: Optional[int]
    content_type: Optional[str]
    folder: str
    path: str
    url: str

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "id": self.id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "size": self.size,
            "content_type": self.content_type,
            "folder": self.folder,
            "path": self.path,
            "url": self.url,
        }


def known_folders() -> List[str]:
    return list(settings.MEDIA_FOLDERS)


def normalize_folder(folder: Optional[str]) -> str:
    f = (folder or "").strip().strip("/")
    if f and f not in known_folders():
        raise RefletError(f"Dossier inconnu: {f}")
    return f


def new_object_name(extension: str) -> str:
    """`{epoch ms}-{random}.{ext}`; unique enough for a single bucket."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:10]}.{extension}"


# -------- Upload --------
def upload_image(
    storage: StorageBackend,
    data: bytes,
    *,
    content_type: Optional[str],
    folder: str = DEFAULT_FOLDER,
    with_thumbnail: bool = False,
) -> UploadResult:
    """
    validate -> resize/compress -> upload. Validation errors are raised before
    anything is decoded; nothing is uploaded when processing fails.
    """
    folder = normalize_folder(folder) or DEFAULT_FOLDER
    image_pipeline.validate(content_type, len(data))

    processed = image_pipeline.resize_and_compress(
        data,
        max_width=settings.IMAGE_MAX_WIDTH,
        max_height=settings.IMAGE_MAX_HEIGHT,
        quality=settings.IMAGE_QUALITY,
    )
    thumb = None
    if with_thumbnail:
        thumb = image_pipeline.create_thumbnail(
            data,
            size=settings.THUMBNAIL_SIZE,
            quality=settings.THUMBNAIL_QUALITY,
        )
    name = new_object_name(processed.extension)
    path = f"{folder}/{name}"
    storage.upload(path, processed.data, processed.content_type, cache_control=settings.STORAGE_CACHE_CONTROL)

    thumb_path = thumb_url = None
    if thumb is not None:
        thumb_path = f"{folder}/{THUMBS_DIR}/{name.rsplit('.', 1)[0]}.{thumb.extension}"
        try:
            storage.upload(thumb_path, thumb.data, thumb.content_type, cache_control=settings.STORAGE_CACHE_CONTROL)
        except DataUnavailable:
            # sin miniatura no queda la imagen principal huérfana en el bucket
            try:
                storage.remove(path)
            except DataUnavailable as e:
                log.error("orphaned upload %s not removed: %s", path, e)
            raise
        thumb_url = storage.get_public_url(thumb_path)

    log.info("media uploaded path=%s size=%d (from %d bytes)", path, processed.size, len(data))
    return UploadResult(
        path=path,
        url=storage.get_public_url(path),
        size=processed.size,
        content_type=processed.content_type,
        thumbnail_path=thumb_path,
        thumbnail_url=thumb_url,
    )


# -------- Library --------
def _to_items(storage: StorageBackend, folder: str, objs: List[StoredObject]) -> List[MediaItem]:
    items = []
    for o in objs:
        # hidden placeholders (".emptyFolderPlaceholder") and sub-folders are skipped
        if not o.name or o.name.startswith(".") or not o.id:
            continue
        items.append(MediaItem(
            name=o.name,
            id=o.id,
            created_at=o.created_at,
            size=o.size,
            content_type=o.content_type,
            folder=folder,
            path=o.path,
            url=storage.get_public_url(o.path),
        ))
    return items


def list_media(storage: StorageBackend, folder: Optional[str] = None, search: Optional[str] = None) -> List[MediaItem]:
    """
    One folder when given, otherwise every known folder plus the bucket root.
    Newest first; `search` filters on the file name, case insensitive.
    """
    if folder:
        f = normalize_folder(folder)
        items = _to_items(storage, f, storage.list(f, limit=LIST_LIMIT))
    else:
        items = []
        for f in known_folders() + [""]:
            items.extend(_to_items(storage, f, storage.list(f, limit=LIST_LIMIT)))
        items.sort(key=lambda i: i.created_at.timestamp() if i.created_at else 0.0, reverse=True)

    if search:
        needle = search.lower()
        items = [i for i in items if needle in i.name.lower()]
    return items


def delete_media(storage: StorageBackend, path: str) -> None:
    path = (path or "").strip().lstrip("/")
    if not path:
        raise RefletError("Chemin vide")
    storage.remove(path)
