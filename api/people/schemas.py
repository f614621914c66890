"""
People API schemas (request/response models).
"""

from __future__ import annotations

from pydantic import BaseModel


class PersonCreate(BaseModel):
    # Presence and emptiness of `name` are checked by the service so that
    # a missing or blank name gets the same 400 message.
    name: str | None = None
    email: str | None = None


class PersonOut(BaseModel):
    id: int
    name: str
    email: str | None = None


class Acknowledgement(BaseModel):
    success: bool = True
    message: str
