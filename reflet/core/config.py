# reflet/core/config.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .settings import settings

# the JSON API is the only cross-origin surface; the HTML console is same-origin
API_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]


def create_app() -> FastAPI:
    is_prod = settings.ENV.lower() in ("prod", "production")
    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        debug=settings.DEBUG and not is_prod,
        docs_url=None if is_prod else "/docs",
        redoc_url=None,
        openapi_url=None if is_prod else f"{settings.API_V1_STR}/openapi.json",
    )

    origins = settings.CORS_ORIGINS
    if origins:
        wildcard = "*" in origins
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if wildcard else origins,
            # cookies never travel to a wildcard origin
            allow_credentials=not wildcard,
            allow_methods=API_METHODS,
            allow_headers=["Authorization", "Content-Type"],
        )
    return app
