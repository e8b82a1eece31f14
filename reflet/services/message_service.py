# reflet/services/message_service.py
from __future__ import annotations

import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from reflet.core.errors import DataUnavailable
from reflet.models.messages import ContactMessage
from reflet.schemas.messages import ContactMessageIn

log = logging.getLogger(__name__)


def submit_message(db: Session, data: ContactMessageIn) -> ContactMessage:
    msg = ContactMessage(
        first_name=data.first_name,
        name=data.name,
        email=str(data.email),
        phone=data.phone,
        subject=data.subject,
        message=data.message,
        is_read=False,
    )
    try:
        db.add(msg)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.error("contact message not stored: %s", e)
        raise DataUnavailable("Votre message n'a pas pu être envoyé, veuillez réessayer.") from e
    db.refresh(msg)
    log.info("contact message #%s received (subject=%s)", msg.id, msg.subject)
    return msg


def list_messages(db: Session) -> List[ContactMessage]:
    try:
        return list(db.scalars(
            select(ContactMessage).order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
        ).all())
    except SQLAlchemyError as e:
        raise DataUnavailable(str(e)) from e


def unread_count(db: Session) -> int:
    try:
        return int(db.scalar(
            select(func.count(ContactMessage.id)).where(ContactMessage.is_read.is_(False))
        ) or 0)
    except SQLAlchemyError as e:
        raise DataUnavailable(str(e)) from e


def mark_read(db: Session, message_id: int, read: bool = True) -> bool:
    try:
        msg = db.get(ContactMessage, message_id)
        if msg is None:
            return False
        msg.is_read = read
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.error("marking message #%s failed: %s", message_id, e)
        raise DataUnavailable("Le message n'a pas pu être mis à jour.") from e
    return True


def delete_message(db: Session, message_id: int) -> bool:
    try:
        msg = db.get(ContactMessage, message_id)
        if msg is None:
            return False
        db.delete(msg)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.error("deleting message #%s failed: %s", message_id, e)
        raise DataUnavailable("Le message n'a pas pu être supprimé.") from e
    log.info("contact message #%s deleted", message_id)
    return True

