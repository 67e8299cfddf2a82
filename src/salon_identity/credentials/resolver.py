"""
salon_identity.credentials.resolver

Token resolver: one usable bearer token per role scope.

Responsibilities:
- Walk role envelopes in scope order and pick the first usable token.
- Exchange pseudo-tokens for signed tokens and write the upgrade back.
- Create envelopes at login (password or face hand-off) and clear them at logout.
"""

from __future__ import annotations

from typing import Protocol

from salon_identity.credentials.models import (
    CredentialEnvelope,
    Role,
    Scope,
    SubjectProfile,
    UserIdentity,
    scope_roles,
)
from salon_identity.credentials.store import LEGACY_TOKEN_KEYS, CredentialStore
from salon_identity.credentials.tokens import PseudoToken, SignedToken, mint_pseudo_token
from salon_identity.errors import ExchangeFailed, NoCredential
from salon_identity.observability.logging import get_logger, token_preview
from salon_identity.settings import Settings

log = get_logger(__name__)


class Exchanger(Protocol):
    async def exchange(self, role: Role, identity_id: str, name: str | None) -> str: ...


class TokenResolver:
    """
    Resolution rules, per role in scope order:

    - no envelope, or envelope not flagged authenticated: skip
    - signed token: return it as-is
    - pseudo-token with a profile: exchange, write back, return the new token;
      on exchange failure move on to the next role
    - anything else: return it and let the server judge it

    Nothing usable raises `NoCredential`.
    """

    def __init__(
        self,
        *,
        store: CredentialStore,
        exchanger: Exchanger,
        settings: Settings,
    ) -> None:
        self._store = store
        self._exchanger = exchanger
        self._settings = settings

    @property
    def store(self) -> CredentialStore:
        return self._store

    def roles_for(self, scope: Scope | str) -> list[Role]:
        return scope_roles(scope, self._settings.any_scope_order)

    async def resolve(
        self, scope: Scope | str = Scope.any, *, force_exchange: bool = False
    ) -> str:
        scope = Scope(scope)
        roles = self.roles_for(scope)

        if force_exchange:
            token = await self._resolve_forced(roles)
            if token is not None:
                return token
            log.info("forced_exchange_unavailable", scope=scope.value)

        for role in roles:
            envelope = await self._candidate(role)
            if envelope is None:
                continue

            decoded = envelope.decoded
            if isinstance(decoded, SignedToken):
                return decoded.raw

            if isinstance(decoded, PseudoToken):
                token = await self._exchange_and_store(role, envelope, decoded.subject_id)
                if token is not None:
                    return token
                continue

            # Opaque: let the server judge it.
            log.warning("unrecognized_token_shape", role=role.value, token=token_preview(decoded.raw))
            return decoded.raw

        raise NoCredential(scope.value)

    async def _resolve_forced(self, roles: list[Role]) -> str | None:
        # Re-exchange even well-formed tokens: the server already rejected one.
        for role in roles:
            envelope = await self._candidate(role)
            if envelope is None:
                continue
            decoded = envelope.decoded
            if isinstance(decoded, PseudoToken):
                identity_id: str | None = decoded.subject_id
            elif envelope.subject_profile is not None:
                identity_id = envelope.subject_profile.identifier
            else:
                identity_id = None
            if not identity_id:
                continue
            token = await self._exchange_and_store(role, envelope, identity_id)
            if token is not None:
                return token
        return None

    async def _candidate(self, role: Role) -> CredentialEnvelope | None:
        envelope = await self._store.get(role)
        if envelope is not None:
            return envelope if envelope.usable else None

        if self._settings.read_legacy_keys:
            legacy = await self._store.get_scalar(LEGACY_TOKEN_KEYS[role])
            if legacy:
                log.info("legacy_token_read", role=role.value)
                return CredentialEnvelope(token=legacy, is_authenticated=True)
        return None

    async def _exchange_and_store(
        self, role: Role, envelope: CredentialEnvelope, identity_id: str
    ) -> str | None:
        profile = envelope.subject_profile
        if profile is None:
            log.warning("exchange_skipped_no_profile", role=role.value)
            return None

        try:
            token = await self._exchanger.exchange(role, identity_id, profile.name)
        except ExchangeFailed as e:
            log.warning("exchange_failed", role=role.value, reason=e.reason, status=e.status_code)
            return None

        await self._store.put(role, envelope.with_token(token))
        return token

    async def is_authenticated(self, scope: Scope | str = Scope.any) -> bool:
        try:
            await self.resolve(scope)
        except NoCredential:
            return False
        return True

    async def auth_headers(self, scope: Scope | str = Scope.any) -> dict[str, str]:
        token = await self.resolve(scope)
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
        }

    async def get_user_type(self) -> Role | None:
        identity = await self._logged_in()
        return identity[0] if identity else None

    async def get_user_data(self) -> UserIdentity | None:
        identity = await self._logged_in()
        if identity is None or identity[1].subject_profile is None:
            return None
        return UserIdentity(role=identity[0], profile=identity[1].subject_profile)

    async def _logged_in(self) -> tuple[Role, CredentialEnvelope] | None:
        for role in self.roles_for(Scope.any):
            envelope = await self._store.get(role)
            if envelope is not None and envelope.usable:
                return role, envelope
        return None

    async def store_login(self, role: Role, token: str, profile: SubjectProfile) -> None:
        await self._store.put(
            role,
            CredentialEnvelope(token=token, subject_profile=profile, is_authenticated=True),
        )
        if role is Role.admin:
            if profile.name:
                await self._store.put_scalar("adminFullName", profile.name)
            if profile.email:
                await self._store.put_scalar("adminEmail", profile.email)
        log.info("login_stored", role=role.value, token=token_preview(token))

    async def establish_face_session(
        self,
        role: Role,
        profile: SubjectProfile,
        *,
        issued_at: int | None = None,
    ) -> str:
        """
        Record a face-identified login as a pseudo-token envelope. The next
        `resolve` for this role exchanges it for a signed token.
        """

        if not profile.identifier:
            raise ValueError("profile.identifier is required for a face session")
        token = mint_pseudo_token(profile.identifier, issued_at)
        await self.store_login(role, token, profile)
        return token

    async def clear_auth_data(self) -> None:
        await self._store.clear_all()
        log.info("auth_data_cleared")


# --- Module Notes -----------------------------------------------------------
# The pseudo-token upgrade is the only store mutation `resolve` performs, and it
# is idempotent: the next call short-circuits on the signed token.
