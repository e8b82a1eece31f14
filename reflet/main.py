from __future__ import annotations

from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from reflet.api.v1.router import api_router
from reflet.core.config import create_app
from reflet.core.errors import AuthRequired
from reflet.core.logging import configure_logging
from reflet.core.settings import settings
from reflet.services.auth_service import SessionEvents, log_session_event
from reflet.web.admin.router import router as admin_router
from reflet.web.auth.router import router as auth_web_router
from reflet.web.deps import PACKAGE_DIR, auth_required_handler
from reflet.web.public.router import router as public_router

configure_logging(debug=settings.DEBUG)
app = create_app()

app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

# Sesión firmada para la consola de administración
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    session_cookie=settings.SESSION_COOKIE_NAME,
    same_site=settings.SESSION_COOKIE_SAMESITE,
    https_only=settings.SESSION_COOKIE_SECURE,
)

# Hub de eventos de sesión; el log de auditoría es el primer suscriptor
app.state.session_events = SessionEvents()
app.state.audit_subscription = app.state.session_events.subscribe(log_session_event)

# Sin sesión en /admin/* -> redirect a /login (no página de error)
app.add_exception_handler(AuthRequired, auth_required_handler)

# API (JWT)
app.include_router(api_router, prefix=settings.API_V1_STR)

# Web (login/admin + sitio público)
app.include_router(auth_web_router)
app.include_router(admin_router)
app.include_router(public_router)

# Static (CSS, imágenes por defecto)
app.mount("/static", StaticFiles(directory=str(PACKAGE_DIR / "static")), name="static")
