# reflet/services/mailer.py
# Envío de emails transaccionales vía API HTTP (formato Resend)
from __future__ import annotations

import logging

import httpx

from reflet.core.settings import settings

log = logging.getLogger(__name__)


def send_email(to: str, subject: str, html: str) -> bool:
    """
    POSTs one message to MAIL_API_URL. Without MAIL_API_KEY nothing is sent and
    False is returned. Transport errors are logged and reported as False.
    """
    if not settings.MAIL_API_KEY:
        log.info("mail API not configured; email to %s not sent (subject=%r)", to, subject)
        return False
    try:
        resp = httpx.post(
            settings.MAIL_API_URL,
            headers={"Authorization": f"Bearer {settings.MAIL_API_KEY}"},
            json={"from": settings.MAIL_FROM, "to": [to], "subject": subject, "html": html},
            timeout=settings.MAIL_TIMEOUT_SECONDS,
        )
        resp.raise_for_status()
    except httpx.HTTPError as e:
        log.error("email to %s failed: %s", to, e)
        return False
    log.info("email sent to %s (subject=%r)", to, subject)
    return True


def send_password_reset_email(to: str, reset_url: str) -> bool:
    html = (
        "<p>Bonjour,</p>"
        "<p>Une réinitialisation du mot de passe de votre compte administrateur "
        "Reflet du Gabon a été demandée.</p>"
        f'<p><a href="{reset_url}">Choisir un nouveau mot de passe</a></p>'
        f"<p>Ce lien expire dans {settings.PASSWORD_RESET_EXPIRE_MINUTES} minutes. "
        "Si vous n'êtes pas à l'origine de cette demande, ignorez ce message.</p>"
    )
    sent = send_email(to, "Réinitialisation de votre mot de passe", html)
    if not sent:
        if settings.DEBUG or not settings.MAIL_API_KEY:
            # sin proveedor de email el enlace solo queda en los logs locales
            log.warning("password reset link for %s: %s", to, reset_url)
        else:
            log.warning("password reset email to %s not delivered", to)
    return sent
