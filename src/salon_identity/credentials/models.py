"""
salon_identity.credentials.models

Credential domain models.

Responsibilities:
- Define roles and resolution scopes.
- Define the per-role credential envelope and the subject profile it carries.
- Convert envelopes to/from the stored JSON layout the app has always written.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from salon_identity.credentials.tokens import Token, decode_token


class Role(enum.StrEnum):
    admin = "admin"
    manager = "manager"


class Scope(enum.StrEnum):
    admin_only = "admin-only"
    manager_only = "manager-only"
    any = "any"


class SubjectProfile(BaseModel):
    """
    Role-specific identity record stored next to the token.
    Unknown backend fields are kept so a round-trip through the store is lossless.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    identifier: str | None = Field(
        default=None, validation_alias=AliasChoices("identifier", "_id", "id")
    )
    name: str | None = None
    email: str | None = None
    reference_image_url: str | None = Field(
        default=None, validation_alias=AliasChoices("reference_image_url", "livePicture")
    )

    @field_validator("identifier", mode="before")
    @classmethod
    def _coerce_identifier(cls, v: Any) -> Any:
        # Backends hand out numeric ids in some environments.
        return str(v) if isinstance(v, int) else v

    def to_wire(self) -> dict[str, Any]:
        data = self.model_dump(exclude_none=True, exclude={"identifier", "reference_image_url"})
        if self.identifier is not None:
            data["_id"] = self.identifier
        if self.reference_image_url is not None:
            data["livePicture"] = self.reference_image_url
        return data


class CredentialEnvelope(BaseModel):
    """
    `{token, subjectProfile, isAuthenticated}` for one role.

    An envelope always has a non-empty token; "no token" is modelled as
    "no envelope".
    """

    model_config = ConfigDict(frozen=True)

    token: str
    subject_profile: SubjectProfile | None = None
    is_authenticated: bool = False

    @field_validator("token")
    @classmethod
    def _token_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("envelope token must be non-empty")
        return v

    @property
    def decoded(self) -> Token:
        token = decode_token(self.token)
        if token is None:
            raise ValueError("envelope token must be non-empty")
        return token

    @property
    def usable(self) -> bool:
        return self.is_authenticated

    def with_token(self, token: str) -> CredentialEnvelope:
        # Whole-envelope replacement: profile and flag carry over untouched.
        return self.model_copy(update={"token": token})

    def to_record(self, role: Role) -> dict[str, Any]:
        record: dict[str, Any] = {"token": self.token, "isAuthenticated": self.is_authenticated}
        if self.subject_profile is not None:
            record[role.value] = self.subject_profile.to_wire()
        return record

    @classmethod
    def from_record(cls, role: Role, record: dict[str, Any]) -> CredentialEnvelope:
        profile_raw = record.get(role.value)
        return cls(
            token=record.get("token") or "",
            subject_profile=(
                SubjectProfile.model_validate(profile_raw) if isinstance(profile_raw, dict) else None
            ),
            is_authenticated=bool(record.get("isAuthenticated", False)),
        )


@dataclass(frozen=True, slots=True)
class UserIdentity:
    """Who is logged in, as reported by `TokenResolver.get_user_data`."""

    role: Role
    profile: SubjectProfile


def scope_roles(scope: Scope | str, any_order: list[str] | tuple[str, ...]) -> list[Role]:
    scope = Scope(scope)
    if scope is Scope.admin_only:
        return [Role.admin]
    if scope is Scope.manager_only:
        return [Role.manager]
    return [Role(r) for r in any_order]


# --- Module Notes -----------------------------------------------------------
# The stored record layout (`{"token", "<role>": {...}, "isAuthenticated"}`) is
# shared with older app builds, so it must not change shape.
