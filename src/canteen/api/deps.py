from __future__ import annotations

from fastapi import Header, HTTPException

from canteen.domain.common.ids import UserId
from canteen.domain.user.entities import ANONYMOUS, Principal, Role

USER_ID_HEADER = "X-User-Id"
USER_ROLE_HEADER = "X-User-Role"
USER_CANTEEN_HEADER = "X-User-Canteen"


def get_principal(
    user_id: str | None = Header(default=None, alias=USER_ID_HEADER),
    role: str | None = Header(default=None, alias=USER_ROLE_HEADER),
    canteen_location: str | None = Header(default=None, alias=USER_CANTEEN_HEADER),
) -> Principal:
    """Builds the caller from headers set by the authenticating gateway.

    Requests without a role header are treated as anonymous customers.
    """
    if role is None or not role.strip():
        return ANONYMOUS

    try:
        parsed_role = Role(role.strip().lower())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"unknown role: {role}") from exc

    return Principal(
        user_id=UserId(user_id) if user_id else None,
        role=parsed_role,
        canteen_location=canteen_location.strip() if canteen_location else None,
    )
