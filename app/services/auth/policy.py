"""
Authorization policy table.

Every protected operation is listed once in ``POLICIES`` with the roles
allowed to call it and, where the operation acts on somebody's resource,
the ownership rule that must also hold.  Admins pass every ownership rule.

``app.routes.auth.dependencies.authorize`` consults this table for each
request; routes that load a document first call ``Caller.ensure_owner``.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Optional

from app.models.auth.user import UserRole
from app.utils.exceptions import PermissionDeniedError


ALL_ROLES: FrozenSet[UserRole] = frozenset(UserRole)
CREATORS: FrozenSet[UserRole] = frozenset({UserRole.CREATOR, UserRole.ADMIN})
ADMINS: FrozenSet[UserRole] = frozenset({UserRole.ADMIN})


# Ownership rules: (caller email, target) -> bool

def same_email(email: str, target: Any) -> bool:
    """Target is an email taken from the request path or query"""
    return bool(target) and target == email


def contest_owner(email: str, contest: Any) -> bool:
    return bool(contest) and contest.get("creatorEmail") == email


def payment_owner(email: str, payment: Any) -> bool:
    return bool(payment) and payment.get("email") == email


@dataclass(frozen=True)
class Policy:
    """Roles allowed to perform an operation plus an optional ownership rule"""
    roles: FrozenSet[UserRole]
    owner: Optional[Callable[[str, Any], bool]] = None
    # Request parameter holding the target email for ``same_email`` rules
    email_param: Optional[str] = None


POLICIES: Dict[str, Policy] = {
    # Users
    "users:list": Policy(ADMINS),
    "users:read_role": Policy(ALL_ROLES, owner=same_email, email_param="email"),
    "users:update_role": Policy(ADMINS),
    "users:delete": Policy(ADMINS),
    "users:update_profile": Policy(ALL_ROLES, owner=same_email, email_param="email"),
    "users:read_profile": Policy(ALL_ROLES, owner=same_email, email_param="email"),

    # Contests
    "contests:create": Policy(CREATORS),
    "contests:list_own": Policy(CREATORS, owner=same_email, email_param="email"),
    "contests:update": Policy(CREATORS, owner=contest_owner),
    "contests:delete": Policy(CREATORS, owner=contest_owner),
    "contests:list_all": Policy(ADMINS),
    "contests:set_status": Policy(ADMINS),
    "contests:select_winner": Policy(CREATORS, owner=contest_owner),

    # Payments and submissions
    "payments:create_intent": Policy(ALL_ROLES),
    "payments:record": Policy(ALL_ROLES),
    "payments:list_own": Policy(ALL_ROLES, owner=same_email, email_param="email"),
    "submissions:submit": Policy(ALL_ROLES, owner=payment_owner),
    "submissions:list_for_contest": Policy(CREATORS, owner=contest_owner),
    "submissions:list_for_creator": Policy(CREATORS, owner=same_email, email_param="email"),
    "submissions:mark_winner": Policy(CREATORS, owner=contest_owner),

    # Stats
    "stats:winning": Policy(ALL_ROLES, owner=same_email, email_param="email"),
    "stats:admin": Policy(ADMINS),
}


@dataclass
class Caller:
    """Authenticated caller as seen by a route after the policy check"""
    email: str
    role: UserRole
    policy: Policy

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def ensure_role(self):
        if self.role not in self.policy.roles:
            raise PermissionDeniedError()

    def ensure_owner(self, target: Any):
        """Apply the policy's ownership rule to ``target``"""
        rule = self.policy.owner
        if rule is None:
            return
        if self.is_admin:
            return
        if not rule(self.email, target):
            raise PermissionDeniedError()
