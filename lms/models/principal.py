from __future__ import annotations

from dataclasses import dataclass

ROLE_ADMIN = "admin"
ROLE_MASTER_PRACTITIONER = "master_practitioner"
ROLE_LEARNER = "learner"

# Roles allowed to read other users' test results
PRIVILEGED_ROLES = frozenset({ROLE_ADMIN, ROLE_MASTER_PRACTITIONER})


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated bearer token.

    Resolved once per request by the ``require_user`` dependency and
    passed explicitly into every service call; services never read
    identity from ambient state.
    """

    user_id: str
    roles: frozenset[str]

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def has_any_role(self, roles: set[str] | frozenset[str]) -> bool:
        return bool(self.roles & roles)

    def is_privileged(self) -> bool:
        return self.has_any_role(PRIVILEGED_ROLES)
