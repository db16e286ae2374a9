"""Pydantic models validating what the page parsers produce."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from redeemsync.domain.model import CodeStatus, Provider
from redeemsync.domain.normalization import sanitize_code_display


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = " ".join(value.split())
        return stripped or None
    return value


class SourceBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class ScrapedCode(SourceBaseModel):
    code: str
    status: CodeStatus = CodeStatus.ACTIVE
    rewards_text: str | None = None
    level_requirement: int | None = Field(default=None, ge=0)
    is_new: bool = False
    provider: Provider

    @field_validator("rewards_text", mode="before")
    @classmethod
    def _normalize_rewards(cls, value: object) -> object:
        return _blank_to_none(value)

    @field_validator("code", mode="before")
    @classmethod
    def _sanitize_code(cls, value: object) -> str:
        display = sanitize_code_display(value)
        if display is None:
            raise ValueError("code must be a non-blank string")
        return display

    @field_validator("status")
    @classmethod
    def _reject_expired(cls, value: CodeStatus) -> CodeStatus:
        if value is CodeStatus.EXPIRED:
            raise ValueError("expired codes belong in expired_codes")
        return value


class ScrapedPage(SourceBaseModel):
    provider: Provider
    source_url: str
    codes: list[ScrapedCode] = Field(default_factory=list[ScrapedCode])
    expired_codes: list[str] = Field(default_factory=list[str])

    @field_validator("expired_codes", mode="before")
    @classmethod
    def _drop_blank_expired(cls, value: object) -> object:
        if isinstance(value, list):
            return [code for code in (sanitize_code_display(raw) for raw in value) if code]
        return value
