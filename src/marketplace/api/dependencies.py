"""Request principal resolved from the authentication gateway's headers.

Authentication happens upstream; by the time a request reaches this
service the caller's identity and role travel as ``X-Actor-Id`` and
``X-Actor-Role``.
"""

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException

from marketplace.shared.choices import ActorRole
from marketplace.shared.errors import Forbidden


@dataclass(frozen=True)
class Principal:
    actor_id: str
    role: ActorRole


def current_principal(
    x_actor_id: str = Header(default=""),
    x_actor_role: str = Header(default=""),
) -> Principal:
    if not x_actor_id or not x_actor_role:
        raise HTTPException(status_code=401, detail="Missing actor credentials")
    try:
        role = ActorRole(x_actor_role.strip().lower())
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Unknown actor role: {x_actor_role}") from None
    return Principal(actor_id=x_actor_id, role=role)


def require_vendor(principal: Principal = Depends(current_principal)) -> Principal:
    if principal.role is not ActorRole.VENDOR:
        raise Forbidden("Only vendors can perform this action")
    return principal


def require_supplier(principal: Principal = Depends(current_principal)) -> Principal:
    if principal.role is not ActorRole.SUPPLIER:
        raise Forbidden("Only suppliers can perform this action")
    return principal
