# reflet/schemas/messages.py
from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

CONTACT_SUBJECTS = (
    "Information générale",
    "Soutenir l'association (don, partenariat)",
    "Demande de prestation culturelle",
    "Réservation restaurant",
    "Bénévolat",
    "Presse et médias",
    "Autre",
)


class ContactMessageIn(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=40)
    subject: str
    message: str = Field(..., min_length=10, max_length=5000)
    consent: bool = False

    @field_validator("first_name", "name", "message", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("phone", mode="before")
    @classmethod
    def blank_phone(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator("subject")
    @classmethod
    def known_subject(cls, v: str) -> str:
        if v not in CONTACT_SUBJECTS:
            raise ValueError("Veuillez choisir un sujet")
        return v

    @field_validator("consent")
    @classmethod
    def must_consent(cls, v: bool) -> bool:
        if not v:
            raise ValueError("Vous devez accepter la politique de confidentialité")
        return v
