"""
tests.test_stub_e2e

End-to-end flows against the stub backend over an in-process ASGI transport.

Responsibilities:
- Face session -> exchange -> protected call.
- Rejected token -> forced exchange -> single retry.
- Capture screens matching against the backend roster, then handing off.
"""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from salon_identity.auth.jwt import JwtConfig, decode_and_validate, issue_token
from salon_identity.credentials.models import CredentialEnvelope, Role, Scope, SubjectProfile
from salon_identity.credentials.store import InMemoryCredentialStore
from salon_identity.errors import NoCredential
from salon_identity.matching.session import CaptureState, face_login_hand_off
from salon_identity.services.identity import IdentityServices
from salon_identity.settings import Settings
from salon_identity.stub.app import create_app
from salon_identity.stub.directory import StubDirectory


class CountingTransport(httpx.ASGITransport):
    def __init__(self, app) -> None:
        super().__init__(app=app)
        self.paths: list[str] = []
        self.compared: list[str] = []
        self.urls: list[str] = [
            p["livePicture"] for p in app.state.directory.people if p.get("livePicture")
        ]

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.paths.append(request.url.path)
        if request.url.path.endswith("/compare-faces"):
            body = await request.aread()
            self.compared.append(next(u for u in self.urls if u.encode() in body))
        return await super().handle_async_request(request)


@pytest.fixture
def stub_settings() -> Settings:
    return Settings(env="test", api_base_url="http://test/api")


@pytest.fixture
def transport(stub_settings: Settings) -> CountingTransport:
    return CountingTransport(create_app(settings=stub_settings))


@pytest_asyncio.fixture
async def services(stub_settings: Settings, transport: CountingTransport):
    svc = await IdentityServices.open(
        stub_settings, store=InMemoryCredentialStore(), transport=transport
    )
    async with svc:
        yield svc


def _camera(label: str):
    async def capture() -> bytes:
        return label.encode()

    return capture


@pytest.mark.asyncio
async def test_face_session_is_exchanged_before_the_protected_call(services, transport) -> None:
    await services.resolver.establish_face_session(
        Role.manager, SubjectProfile(identifier="m42", name="Sana")
    )

    response = await services.notifications.list()

    assert response["success"] is True
    assert [n["id"] for n in response["data"]["notifications"]] == ["n1"]
    assert response["data"]["unreadCount"] == 1
    assert transport.paths == ["/api/manager/face-login", "/api/notifications"]

    stored = await services.store.get(Role.manager)
    assert stored is not None and stored.token.startswith("eyJ")


@pytest.mark.asyncio
async def test_rejected_token_is_refreshed_once(services, transport) -> None:
    await services.store.put(
        Role.manager,
        CredentialEnvelope(
            token="eyJgarbage",
            subject_profile=SubjectProfile(identifier="m42", name="Sana"),
            is_authenticated=True,
        ),
    )

    assert await services.notifications.unread_count() == 1
    assert transport.paths == [
        "/api/notifications/count",
        "/api/manager/face-login",
        "/api/notifications/count",
    ]


@pytest.mark.asyncio
async def test_attendance_capture_matches_employee(services, stub_settings, transport) -> None:
    token = issue_token(cfg=JwtConfig.from_settings(stub_settings), subject="a1", roles=["admin"])
    await services.resolver.store_login(
        Role.admin, token, SubjectProfile(identifier="a1", name="Ayesha")
    )
    session = services.capture_session(_camera("ravi"))

    result = await session.capture()

    assert result is not None and result.matched
    assert result.candidate is not None and result.candidate.identifier == "e7"
    assert result.confidence == 88.0
    # a1 and m42 are compared before e7; e8 has no picture and is never compared.
    assert transport.paths.count("/api/employees/compare-faces") == 3
    assert session.state is CaptureState.matched


@pytest.mark.asyncio
async def test_manager_face_login_end_to_end(services, stub_settings) -> None:
    token = issue_token(cfg=JwtConfig.from_settings(stub_settings), subject="a1", roles=["admin"])
    await services.resolver.store_login(
        Role.admin, token, SubjectProfile(identifier="a1", name="Ayesha")
    )
    session = services.capture_session(_camera("sana"))

    result = await session.capture()
    assert result is not None and result.candidate is not None
    assert result.candidate.identifier == "m42"

    manager_token = await session.hand_off(face_login_hand_off(services.resolver))

    claims = decode_and_validate(cfg=JwtConfig.from_settings(stub_settings), token=manager_token)
    assert claims["sub"] == "m42"
    assert claims["roles"] == ["manager"]
    assert await services.resolver.resolve(Scope.manager_only) == manager_token
    assert await services.resolver.get_user_type() is Role.manager


@pytest.mark.asyncio
async def test_unknown_probe_is_unmatched(services, stub_settings) -> None:
    token = issue_token(cfg=JwtConfig.from_settings(stub_settings), subject="a1", roles=["admin"])
    await services.resolver.store_login(
        Role.admin, token, SubjectProfile(identifier="a1", name="Ayesha")
    )
    session = services.capture_session(_camera("stranger"))

    result = await session.capture()

    assert result is not None and not result.matched
    assert session.state is CaptureState.idle
    assert session.message is not None and "not recognized" in session.message


def _advance_directory() -> StubDirectory:
    people = [
        {"_id": "e1", "name": "Ravi", "role": "employee", "livePicture": "https://cdn.example/e1.jpg"},
        {"_id": "e2", "name": "Imran", "role": "employee", "livePicture": "https://cdn.example/e2.jpg"},
        {"_id": "m1", "name": "Sana", "role": "manager", "livePicture": "https://cdn.example/m1.jpg"},
        {"_id": "a1", "name": "Ayesha", "role": "admin", "livePicture": "https://cdn.example/a1.jpg"},
    ]
    scores = {"ravi": {"https://cdn.example/e1.jpg": 75.0}}
    return StubDirectory(people=people, scores=scores)


@pytest_asyncio.fixture
async def advance(stub_settings: Settings):
    transport = CountingTransport(create_app(settings=stub_settings, directory=_advance_directory()))
    svc = await IdentityServices.open(
        stub_settings, store=InMemoryCredentialStore(), transport=transport
    )
    async with svc:
        yield svc, transport


async def _login(svc: IdentityServices, settings: Settings, role: Role, subject: str) -> None:
    token = issue_token(cfg=JwtConfig.from_settings(settings), subject=subject, roles=[role.value])
    await svc.resolver.store_login(role, token, SubjectProfile(identifier=subject, name=subject))


@pytest.mark.asyncio
async def test_advance_salary_compares_managers_first_at_relaxed_threshold(
    advance, stub_settings
) -> None:
    svc, transport = advance
    await _login(svc, stub_settings, Role.manager, "m1")

    result = await svc.advance_salary_session(_camera("ravi")).capture()

    assert result is not None and result.matched
    assert result.candidate is not None and result.candidate.identifier == "e1"
    assert result.confidence == 75.0
    # Admins are not part of this roster; managers come before employees.
    assert transport.compared == ["https://cdn.example/m1.jpg", "https://cdn.example/e1.jpg"]


@pytest.mark.asyncio
async def test_default_threshold_rejects_the_same_confidence(advance, stub_settings) -> None:
    svc, _ = advance
    await _login(svc, stub_settings, Role.manager, "m1")

    result = await svc.capture_session(_camera("ravi")).capture()

    assert result is not None and not result.matched
    assert result.confidence == 75.0


@pytest.mark.asyncio
async def test_advance_salary_requires_a_manager_session(advance, stub_settings) -> None:
    svc, transport = advance
    await _login(svc, stub_settings, Role.admin, "a1")
    session = svc.advance_salary_session(_camera("ravi"))

    assert await session.capture() is None

    assert isinstance(session.last_error, NoCredential)
    assert session.last_error.scope == Scope.manager_only.value
    assert transport.compared == []
