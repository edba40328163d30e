# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Authorization gate.

Resolves a caller email to its Member record and evaluates role/committee
policies against an immutable snapshot of that member. Read + predicate
only, no side effects besides logging and the denial counter.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from clubflow.core.errors import Forbidden, NotFound
from clubflow.core.logging import get_logger
from clubflow.metrics import AUTHORIZATION_DENIALS
from clubflow.models.domain import Member
from clubflow.repositories.member_repository import MemberRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class Actor:
    """What a policy sees of the caller."""
    member_id: str
    email: str
    role: str
    committee: str

    @classmethod
    def of(cls, member: Member) -> "Actor":
        return cls(member.id, member.email, member.role, member.committee)


@dataclass(frozen=True)
class AuthorizationPolicy:
    """
    Roles allowed, optionally narrowed to one committee.
    ``committee=None`` means any committee.
    """
    allowed_roles: frozenset
    committee: Optional[str] = None

    def permits(self, actor: Actor) -> bool:
        if actor.role not in self.allowed_roles:
            return False
        return self.committee is None or actor.committee == self.committee

    def describe(self) -> str:
        roles = "/".join(sorted(self.allowed_roles))
        if self.committee is None:
            return f"role {roles}"
        return f"role {roles} in committee '{self.committee}'"


def role_policy(roles: Iterable[str]) -> AuthorizationPolicy:
    return AuthorizationPolicy(frozenset(roles))


def head_of_committee(committee: str) -> AuthorizationPolicy:
    """The composite check gating committee-scoped mutations."""
    return AuthorizationPolicy(frozenset({"head"}), committee)


class AuthorizationGate:
    """Identity resolution and policy checks shared by every engine."""

    def __init__(self, member_repo: MemberRepository) -> None:
        self._members = member_repo

    def resolve(self, email: str) -> Member:
        """Load the caller on every call; no identity caching across requests."""
        member = self._members.get_by_email(email.strip().lower())
        if member is None:
            raise NotFound(f"Member '{email}' not found")
        return member

    def enforce(self, member: Member, policy: AuthorizationPolicy, action: str) -> None:
        actor = Actor.of(member)
        if policy.permits(actor):
            return
        AUTHORIZATION_DENIALS.labels(action=action).inc()
        logger.info(
            "Denied %s: member=%s role=%s committee=%s requires %s",
            action, actor.email, actor.role, actor.committee, policy.describe(),
        )
        raise Forbidden(f"Not allowed to {action}: requires {policy.describe()}")

    def require_role(self, member: Member, allowed_roles: Iterable[str],
                     action: str = "perform this action") -> None:
        self.enforce(member, role_policy(allowed_roles), action)

    def require_same_committee(self, member: Member, committee: str,
                               action: str = "perform this action") -> None:
        if member.committee != committee:
            AUTHORIZATION_DENIALS.labels(action=action).inc()
            raise Forbidden(
                f"Not allowed to {action}: member committee '{member.committee}' "
                f"does not match '{committee}'"
            )

    def require_head_of_committee(self, member: Member, committee: str,
                                  action: str = "perform this action") -> None:
        self.enforce(member, head_of_committee(committee), action)
