"""Domain allow-list check for the platform identity header.

The hosting platform forwards the signed-in user as base64-encoded JSON in
``x-ms-client-principal``. Requests without the header are admitted: that
is local development, where no platform authentication is in front of us.
"""

import base64
import json
from typing import Annotated, Any

from fastapi import Depends, Header, Request

from healthagent.config import Settings, get_settings
from healthagent.shared.exceptions import DomainNotAllowedError, IdentityDecodeError
from healthagent.shared.logging import get_logger

logger = get_logger(__name__)

PRINCIPAL_HEADER = "x-ms-client-principal"


def decode_principal(header_value: str) -> dict[str, Any]:
    """Decode the base64 JSON principal.

    Raises:
        IdentityDecodeError: If the value is not base64, not UTF-8, not JSON
            or not a JSON object.
    """
    try:
        decoded = base64.b64decode(header_value).decode("utf-8")
        principal = json.loads(decoded)
    except ValueError as exc:
        raise IdentityDecodeError() from exc
    if not isinstance(principal, dict):
        raise IdentityDecodeError()
    return principal


def check_access(allowed_domain: str | None, principal_header: str | None) -> str | None:
    """Admit or reject a caller.

    Returns the admitted identity, or None when no check was performed.

    Raises:
        IdentityDecodeError: The header is present but unreadable.
        DomainNotAllowedError: The identity is outside the allowed domain.
    """
    domain = (allowed_domain or "").strip().lower()
    if not domain or not principal_header:
        return None

    principal = decode_principal(principal_header)
    user_details = principal.get("userDetails")
    if user_details is None:
        user_details = ""
    if not isinstance(user_details, str):
        raise IdentityDecodeError()

    identity = user_details.lower()
    if not identity.endswith(f"@{domain}"):
        raise DomainNotAllowedError()
    return identity


async def require_allowed_identity(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    x_ms_client_principal: Annotated[str | None, Header()] = None,
) -> str | None:
    """Dependency that enforces the domain allow-list.

    Usage:
        @router.post("/chat")
        async def chat(identity: AllowedIdentity): ...
    """
    identity = check_access(settings.allowed_domain.strip() or None, x_ms_client_principal)
    # Used as the rate limit key
    request.state.identity = identity
    if identity is not None:
        logger.debug("identity_admitted")
    return identity


AllowedIdentity = Annotated[str | None, Depends(require_allowed_identity)]
