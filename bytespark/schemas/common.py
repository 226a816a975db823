from __future__ import annotations

from pydantic import BaseModel


class LocaleItem(BaseModel):
    code: str
    name: str
    direction: str
    canonical: bool = False


class LocaleListResponse(BaseModel):
    default: str
    locales: list[LocaleItem]


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
