"""
Authenticated principal.

Principals are built from verified token claims for the duration of one
request. They are never stored.
"""
from dataclasses import dataclass, field
from typing import Any, Iterable


ANONYMOUS_ID = "anonymous"


def _as_tuple(values: Iterable[str] | str | None) -> tuple[str, ...]:
    if not values:
        return ()
    if isinstance(values, str):
        values = [values]
    # Preserve claim order, drop duplicates
    return tuple(dict.fromkeys(str(value) for value in values))


@dataclass(frozen=True)
class Principal:
    """
    The requesting actor.

    ``roles`` keeps the order in which the token lists them; the ability
    factory applies role rules in that order. ``groups`` are the access
    groups used by own-resource rules.
    """
    __subject__ = "User"

    id: str
    username: str
    email: str | None = None
    roles: tuple[str, ...] = ()
    groups: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_anonymous(self) -> bool:
        return self.id == ANONYMOUS_ID

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls(id=ANONYMOUS_ID, username=ANONYMOUS_ID)

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "Principal":
        principal_id = claims.get("sub") or claims.get("id")
        username = claims.get("username") or principal_id
        return cls(
            id=str(principal_id),
            username=str(username),
            email=claims.get("email"),
            roles=_as_tuple(claims.get("roles")),
            groups=frozenset(_as_tuple(claims.get("groups"))),
        )

    def to_claims(self) -> dict[str, Any]:
        return {
            "sub": self.id,
            "username": self.username,
            "email": self.email,
            "roles": list(self.roles),
            "groups": sorted(self.groups),
        }

    def __repr__(self) -> str:
        return f"<Principal(id={self.id}, roles={list(self.roles)})>"

