# reflet/api/v1/endpoints/media.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from reflet.api.deps import get_current_user
from reflet.core.errors import DataUnavailable, DecodeError, ImageValidationError, RefletError
from reflet.models.auth import User
from reflet.services import media_service
from reflet.services.storage import StorageBackend, get_storage

router = APIRouter()


@router.post("/upload")
async def upload(
    file: UploadFile = File(...),
    folder: str = Form(default=media_service.DEFAULT_FOLDER),
    thumbnail: bool = Form(default=False),
    storage: StorageBackend = Depends(get_storage),
    user: User = Depends(get_current_user),
):
    data = await file.read()
    try:
        result = media_service.upload_image(
            storage, data, content_type=file.content_type, folder=folder, with_thumbnail=thumbnail
        )
    except (ImageValidationError, DecodeError) as e:
        raise HTTPException(status_code=422, detail=e.message)
    except DataUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message)
    except RefletError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return {
        "path": result.path,
        "url": result.url,
        "size": result.size,
        "content_type": result.content_type,
        "thumbnail_url": result.thumbnail_url,
    }


@router.get("")
def library(
    folder: Optional[str] = Query(default=None),
    q: Optional[str] = Query(default=None),
    storage: StorageBackend = Depends(get_storage),
    user: User = Depends(get_current_user),
):
    try:
        files = media_service.list_media(storage, folder=folder or None, search=q)
    except DataUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message)
    except RefletError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return {"files": [f.to_dict() for f in files]}


@router.delete("/{path:path}", status_code=204)
def remove(
    path: str,
    storage: StorageBackend = Depends(get_storage),
    user: User = Depends(get_current_user),
):
    try:
        media_service.delete_media(storage, path)
    except DataUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message)
    except RefletError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return None
