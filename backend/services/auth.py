"""
Capability gating.

Who holds which role is decided by the authentication collaborator; the
service layer only receives an explicit Actor and checks the capability an
operation needs.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass

from backend.app.db.models.core_types import Role
from backend.services.errors import AuthorizationError


class Capability(str, enum.Enum):
    view = "view"  # any authenticated user
    edit = "edit"  # Storekeeper / Admin
    admin = "admin"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.admin: frozenset({Capability.view, Capability.edit, Capability.admin}),
    Role.storekeeper: frozenset({Capability.view, Capability.edit}),
    Role.technician: frozenset({Capability.view}),
    Role.viewer: frozenset({Capability.view}),
}


@dataclass(frozen=True)
class Actor:
    name: str
    role: Role

    def can(self, capability: Capability) -> bool:
        return capability in ROLE_CAPABILITIES.get(self.role, frozenset())


SYSTEM_ACTOR = Actor(name="System", role=Role.admin)


def require_capability(actor: Actor, capability: Capability, action: str | None = None) -> None:
    if actor.can(capability):
        return
    what = action or "this operation"
    if capability is Capability.admin:
        raise AuthorizationError(f"Only Admins can perform {what}")
    raise AuthorizationError(f"Role {actor.role.value} is not allowed to perform {what}")
