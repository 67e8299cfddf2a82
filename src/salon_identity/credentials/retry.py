"""
salon_identity.credentials.retry

Unauthorized-retry wrapper for protected REST calls.

Responsibilities:
- Own the one rule that says "the server rejected this token" (`is_auth_error`).
- Resolve a token, run the action, and on rejection force an exchange and retry once.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from salon_identity.credentials.models import Scope
from salon_identity.credentials.resolver import TokenResolver
from salon_identity.errors import AuthorizationRejected, NoCredential
from salon_identity.observability.logging import get_logger, token_preview

log = get_logger(__name__)

Response = Mapping[str, Any]
Action = Callable[[str], Awaitable[Response]]

_AUTH_ERROR_RE = re.compile(
    r"401|unauthorized|invalid\s*face\s*authentication\s*token",
    re.IGNORECASE,
)


def is_auth_error(response: Response | None) -> bool:
    """
    True when `response` reports a rejected credential.

    A structured `code: "UNAUTHORIZED"` wins; otherwise the error text is
    matched, since not every backend route returns a code.
    """

    if not response or response.get("success") is not False:
        return False
    if str(response.get("code", "")).upper() == "UNAUTHORIZED":
        return True
    return bool(_AUTH_ERROR_RE.search(str(response.get("error") or "")))


async def call_with_retry(
    resolver: TokenResolver,
    action: Action,
    *,
    scope: Scope | str = Scope.any,
    raise_on_reject: bool = False,
) -> Response:
    scope = Scope(scope)
    # No token, no call: NoCredential propagates to the caller untouched.
    token = await resolver.resolve(scope)
    response = await action(token)

    if not is_auth_error(response):
        return response

    # Refresh only after the first failure is classified, never speculatively.
    log.info("auth_rejected_retrying", scope=scope.value, token=token_preview(token))
    try:
        refreshed = await resolver.resolve(scope, force_exchange=True)
    except NoCredential:
        log.warning("retry_without_credential", scope=scope.value)
        if raise_on_reject:
            raise AuthorizationRejected(response) from None
        return response

    response = await action(refreshed)
    if raise_on_reject and is_auth_error(response):
        raise AuthorizationRejected(response)
    return response


# --- Module Notes -----------------------------------------------------------
# One retry bounds latency and cannot loop on a credential the server keeps rejecting.
