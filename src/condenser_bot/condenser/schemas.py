"""Pydantic schemas for the Condenser link shortener API.

Requests are frozen: each one is built once per invocation and consumed by a
single HTTP call. Responses are validated straight from the raw body.
"""

from typing import Optional

from pydantic import AnyHttpUrl, AwareDatetime, BaseModel, ConfigDict, field_validator


def _upper(code: Optional[str]) -> Optional[str]:
    return code.upper() if code is not None else None


class ServiceCredentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_key: str
    base_url: str


class ShortenRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    code: Optional[str] = None
    meta: Optional[str] = None

    @field_validator("code")
    @classmethod
    def normalize_code(cls, code: Optional[str]) -> Optional[str]:
        return _upper(code)


class ShortenResponse(BaseModel):
    short_url: AnyHttpUrl


class LinkMetadata(BaseModel):
    owner: str
    time: AwareDatetime
    user_meta: Optional[str] = None


class MetaResponse(BaseModel):
    full_url: AnyHttpUrl
    meta: LinkMetadata


class DeleteRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str

    @field_validator("code")
    @classmethod
    def normalize_code(cls, code: Optional[str]) -> Optional[str]:
        return _upper(code)


class DeleteResponse(BaseModel):
    code: str
    status: str
