from __future__ import annotations

import logging
import os
import threading
import urllib.parse
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

import firebase_admin
from firebase_admin import credentials, storage
from google.api_core.exceptions import GoogleAPIError

from reflet.core.errors import DataUnavailable
from reflet.core.settings import settings

log = logging.getLogger(__name__)

_FIREBASE_APP = None


@dataclass(frozen=True)
class StoredObject:
    name: str               # file name inside its folder
    path: str               # full object path, e.g. "gallery/1712-ab12cd.webp"
    id: Optional[str]
    created_at: Optional[datetime]
    size: Optional[int]
    content_type: Optional[str]


class StorageBackend(Protocol):
    def upload(
        self,
        path: str,
        data: bytes,
        content_type: str,
        cache_control: str = "3600",
        overwrite: bool = False,
    ) -> str: ...

    def get_public_url(self, path: str) -> str: ...

    def list(self, folder: str = "", limit: int = 100, sort_desc: bool = True) -> List[StoredObject]: ...

    def remove(self, path: str) -> None: ...


def _folder_prefix(folder: str) -> str:
    folder = (folder or "").strip("/")
    return f"{folder}/" if folder else ""


def _sort_objects(objs: List[StoredObject], sort_desc: bool) -> List[StoredObject]:
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(objs, key=lambda o: o.created_at or epoch, reverse=sort_desc)


# ---------- Firebase ----------
def _normalize_bucket(bucket: str) -> str:
    if bucket.startswith("gs://"):
        return bucket[5:]
    return bucket


def is_firebase_configured() -> bool:
    cred_path = settings.FIREBASE_CREDENTIALS_PATH or ""
    bucket = settings.FIREBASE_STORAGE_BUCKET or ""
    if not cred_path or not bucket:
        return False
    return os.path.exists(cred_path)


def _get_firebase_app():
    global _FIREBASE_APP
    if _FIREBASE_APP is not None:
        return _FIREBASE_APP
    try:
        _FIREBASE_APP = firebase_admin.get_app()
        return _FIREBASE_APP
    except ValueError:
        pass

    cred_path = settings.FIREBASE_CREDENTIALS_PATH or ""
    bucket = settings.FIREBASE_STORAGE_BUCKET or ""
    if not cred_path:
        raise RuntimeError("FIREBASE_CREDENTIALS_PATH is not set")
    if not os.path.exists(cred_path):
        raise RuntimeError("FIREBASE_CREDENTIALS_PATH does not exist")
    if not bucket:
        raise RuntimeError("FIREBASE_STORAGE_BUCKET is not set")

    cred = credentials.Certificate(cred_path)
    _FIREBASE_APP = firebase_admin.initialize_app(
        cred,
        {"storageBucket": _normalize_bucket(bucket)},
    )
    return _FIREBASE_APP


class FirebaseStorage:
    """Media bucket on Firebase Storage. Objects are expected to be publicly readable."""

    def __init__(self, bucket_name: Optional[str] = None):
        self.bucket_name = _normalize_bucket(bucket_name or settings.FIREBASE_STORAGE_BUCKET or "")

    def _bucket(self):
        return storage.bucket(name=self.bucket_name or None, app=_get_firebase_app())

    def upload(self, path, data, content_type, cache_control="3600", overwrite=False) -> str:
        try:
            blob = self._bucket().blob(path)
            blob.cache_control = f"max-age={cache_control}"
            kwargs = {} if overwrite else {"if_generation_match": 0}
            blob.upload_from_string(data, content_type=content_type, **kwargs)
        except GoogleAPIError as e:
            log.error("storage upload failed path=%s: %s", path, e)
            raise DataUnavailable(f"Échec de l'envoi de '{path}': {e}") from e
        log.info("uploaded %s (%d bytes, %s)", path, len(data), content_type)
        return path

    def get_public_url(self, path: str) -> str:
        encoded_path = urllib.parse.quote(path, safe="")
        return f"https://firebasestorage.googleapis.com/v0/b/{self.bucket_name}/o/{encoded_path}?alt=media"

    def list(self, folder="", limit=100, sort_desc=True) -> List[StoredObject]:
        prefix = _folder_prefix(folder)
        try:
            # listings come back in name order: sort the whole folder, then apply the limit
            blobs = list(self._bucket().list_blobs(prefix=prefix, delimiter="/"))
        except GoogleAPIError as e:
            log.error("storage list failed folder=%s: %s", folder, e)
            raise DataUnavailable(f"Impossible de lister '{folder or '/'}': {e}") from e
        objs = [
            StoredObject(
                name=b.name[len(prefix):],
                path=b.name,
                id=b.id,
                created_at=b.time_created,
                size=b.size,
                content_type=b.content_type,
            )
            for b in blobs
            if b.name != prefix
        ]
        return _sort_objects(objs, sort_desc)[:limit]

    def remove(self, path: str) -> None:
        try:
            self._bucket().blob(path).delete()
        except GoogleAPIError as e:
            log.error("storage delete failed path=%s: %s", path, e)
            raise DataUnavailable(f"Impossible de supprimer '{path}': {e}") from e
        log.info("deleted %s", path)


# ---------- In memory (tests / local runs without Firebase) ----------
class InMemoryStorage:
    def __init__(self, base_url: str = "/media"):
        self.base_url = base_url.rstrip("/")
        self._objects: Dict[str, Dict[str, object]] = {}
        self._lock = threading.Lock()

    def upload(self, path, data, content_type, cache_control="3600", overwrite=False) -> str:
        with self._lock:
            if path in self._objects and not overwrite:
                raise DataUnavailable(f"L'objet '{path}' existe déjà")
            self._objects[path] = {
                "data": bytes(data),
                "content_type": content_type,
                "cache_control": cache_control,
                "created_at": datetime.now(timezone.utc),
            }
        return path

    def get_public_url(self, path: str) -> str:
        return f"{self.base_url}/{urllib.parse.quote(path)}"

    def get(self, path: str) -> Optional[Dict[str, object]]:
        return self._objects.get(path)

    def list(self, folder="", limit=100, sort_desc=True) -> List[StoredObject]:
        prefix = _folder_prefix(folder)
        with self._lock:
            items = list(self._objects.items())
        objs = []
        for path, meta in items:
            if not path.startswith(prefix):
                continue
            name = path[len(prefix):]
            if "/" in name:
                # nested "directories" are not listed, like a delimited bucket listing
                continue
            objs.append(StoredObject(
                name=name,
                path=path,
                id=path,
                created_at=meta["created_at"],
                size=len(meta["data"]),
                content_type=meta["content_type"],
            ))
        return _sort_objects(objs, sort_desc)[:limit]

    def remove(self, path: str) -> None:
        with self._lock:
            if self._objects.pop(path, None) is None:
                raise DataUnavailable(f"L'objet '{path}' n'existe pas")


_local_storage: Optional[InMemoryStorage] = None


def get_storage() -> StorageBackend:
    """FastAPI dependency: Firebase when configured, a process-local store otherwise."""
    global _local_storage
    if is_firebase_configured():
        return FirebaseStorage()
    if _local_storage is None:
        log.warning("Firebase Storage not configured; media is kept in memory")
        _local_storage = InMemoryStorage()
    return _local_storage
