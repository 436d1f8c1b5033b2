"""
Ability factory: compiles the role rule table into a per-principal Ability.

The tables below are built once at import and exposed read-only. Nothing
here performs I/O; the same principal always yields the same Ability.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from catalog.features.permissions.ability import ALL_SUBJECTS, Ability, AbilityBuilder, Rule
from catalog.features.permissions.actions import Action
from catalog.features.users.models import Principal
from catalog.utils import get_logger


log = get_logger(__name__)


@dataclass(frozen=True)
class OwnRule:
    """
    Template for a rule scoped to the principal's own resources.

    Resolves to a conditional rule comparing the resource ``field`` with
    the principal's ``principal_attribute``.
    """
    action: Action
    subject: str
    field: str
    principal_attribute: str

    def resolve(self, principal: Principal) -> Rule:
        value = getattr(principal, self.principal_attribute)
        if isinstance(value, (set, frozenset)):
            value = frozenset(value)
        return Rule(
            action=self.action,
            subject=self.subject,
            conditions=MappingProxyType({self.field: value}),
        )


def _can(action: Action, subject: str) -> Rule:
    return Rule(action=action, subject=subject)


def _cannot(action: Action, subject: str) -> Rule:
    return Rule(action=action, subject=subject, inverted=True)


ROLE_RULES: Mapping[str, tuple[Rule, ...]] = MappingProxyType({
    "admin": (
        _can(Action.Manage, ALL_SUBJECTS),
    ),
    "ingestor": (
        _can(Action.Manage, "Proposal"),
        _cannot(Action.Delete, "Proposal"),
        _can(Action.Create, "Dataset"),
        _can(Action.Read, "Dataset"),
        _can(Action.ReadAll, "Dataset"),
        _can(Action.ListAll, "Dataset"),
        _can(Action.Update, "Dataset"),
        _can(Action.Create, "Datablock"),
        _can(Action.Read, "Datablock"),
        _can(Action.Update, "Datablock"),
        _can(Action.Create, "Attachment"),
        _can(Action.Read, "Attachment"),
        _can(Action.Update, "Attachment"),
        _can(Action.UserCreateJwt, "User"),
    ),
    "archivemanager": (
        _can(Action.Read, "Dataset"),
        _can(Action.ReadAll, "Dataset"),
        _can(Action.ListAll, "Dataset"),
        _can(Action.Delete, "Dataset"),
        _can(Action.Read, "Datablock"),
        _can(Action.Delete, "Datablock"),
    ),
    "user": (
        _can(Action.Read, "Proposal"),
        _can(Action.Read, "Dataset"),
        _can(Action.Create, "Dataset"),
        _can(Action.ListOwn, "Dataset"),
        _can(Action.Read, "Datablock"),
        _can(Action.Read, "Attachment"),
        _can(Action.Create, "Attachment"),
        _can(Action.UserCreateJwt, "User"),
    ),
})

OWN_RULES: Mapping[str, tuple[OwnRule, ...]] = MappingProxyType({
    "user": (
        OwnRule(Action.Update, "Dataset", "created_by", "username"),
        OwnRule(Action.Delete, "Dataset", "created_by", "username"),
        OwnRule(Action.ReadOwn, "Dataset", "owner_group", "groups"),
        OwnRule(Action.Update, "Attachment", "created_by", "username"),
        OwnRule(Action.UserReadOwn, "User", "id", "id"),
        OwnRule(Action.UserUpdateOwn, "User", "id", "id"),
    ),
})


def build_ability_for(principal: Optional[Principal]) -> Ability:
    """
    Compile the Ability for ``principal``.

    Static role rules are appended in the principal's role order, then the
    own-resource rules of the same roles, so that ownership rules refine
    the broader grants. Unknown roles (and a missing principal) contribute
    no rules.
    """
    builder = AbilityBuilder()
    if principal is None:
        return builder.build()

    known_roles = []
    for role in principal.roles:
        rules = ROLE_RULES.get(role)
        if rules is None and role not in OWN_RULES:
            log.debug("Ignoring unknown role %r for principal %s", role, principal.id)
            continue
        known_roles.append(role)
        builder.extend(rules or ())

    for role in known_roles:
        builder.extend(template.resolve(principal) for template in OWN_RULES.get(role, ()))

    return builder.build()
