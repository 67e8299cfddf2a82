"""
salon_identity.services.identity

Composition root for the identity subsystem.

Responsibilities:
- Own the shared httpx client and the credential store lifecycle.
- Build resolvers, matchers and capture sessions with consistent settings.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import httpx

from salon_identity.clients.backend_http import BackendClient, NotificationService, create_http_client
from salon_identity.credentials.exchange import FaceLoginExchanger
from salon_identity.credentials.models import Scope
from salon_identity.credentials.resolver import TokenResolver
from salon_identity.credentials.sql_store import SqlCredentialStore
from salon_identity.credentials.store import CredentialStore
from salon_identity.matching.matcher import BackendFaceComparer, FaceRosterMatcher
from salon_identity.matching.roster import RoleTag
from salon_identity.matching.session import Camera, CaptureSession, backend_roster_source
from salon_identity.settings import Settings


@dataclass
class IdentityServices:
    settings: Settings
    http: httpx.AsyncClient
    store: CredentialStore
    resolver: TokenResolver
    backend: BackendClient
    notifications: NotificationService

    @classmethod
    async def open(
        cls,
        settings: Settings,
        *,
        store: CredentialStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> IdentityServices:
        # Without an explicit store the persistent SQLite store is opened.
        if store is None:
            store = await SqlCredentialStore.open(settings)
        http = create_http_client(settings, transport=transport)
        resolver = TokenResolver(
            store=store,
            exchanger=FaceLoginExchanger(settings=settings, http=http),
            settings=settings,
        )
        backend = BackendClient(settings=settings, http=http)
        return cls(
            settings=settings,
            http=http,
            store=store,
            resolver=resolver,
            backend=backend,
            notifications=NotificationService(resolver=resolver, client=backend),
        )

    async def aclose(self) -> None:
        await self.http.aclose()
        if isinstance(self.store, SqlCredentialStore):
            await self.store.close()

    async def __aenter__(self) -> IdentityServices:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    def matcher(self, *, scope: Scope = Scope.any, threshold: float | None = None) -> FaceRosterMatcher:
        comparer = BackendFaceComparer(client=self.backend, resolver=self.resolver, scope=scope)
        return FaceRosterMatcher(
            comparer,
            threshold=self.settings.match_threshold if threshold is None else threshold,
        )

    def capture_session(
        self,
        camera: Camera,
        *,
        roles: Sequence[RoleTag] = ("employee", "manager", "admin"),
        role_order: Sequence[RoleTag] | None = None,
        scope: Scope = Scope.any,
        threshold: float | None = None,
    ) -> CaptureSession:
        return CaptureSession(
            matcher=self.matcher(scope=scope, threshold=threshold),
            camera=camera,
            roster_source=backend_roster_source(
                client=self.backend,
                resolver=self.resolver,
                roles=roles,
                role_order=role_order,
                scope=scope,
            ),
        )

    def advance_salary_session(self, camera: Camera) -> CaptureSession:
        # Managers are compared first and the threshold is relaxed for this flow.
        return self.capture_session(
            camera,
            roles=("manager", "employee"),
            role_order=("manager", "employee"),
            scope=Scope.manager_only,
            threshold=self.settings.relaxed_match_threshold,
        )


# --- Module Notes -----------------------------------------------------------
# Screens get everything they need from one `IdentityServices`; nothing here is global.
