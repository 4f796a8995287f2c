from __future__ import annotations

from typing import Any
from uuid import UUID

from chat_hub.application.dto.principal import Principal


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Map decoded token claims to a Principal.

    Tokens issued by the account service carry ``user_id`` and ``username``;
    ``sub`` is accepted for tokens from generic identity providers.
    """
    raw_id = payload.get("user_id", payload.get("sub"))
    if raw_id is None:
        raise ValueError("token has no user_id or sub claim")
    return Principal(
        user_id=UUID(str(raw_id)),
        display_name=payload.get("username") or "Unknown",
        roles=list(payload.get("roles", [])),
    )
