"""
Rules and the compiled Ability evaluated by the policy guards.

A subject is either a type (a name such as ``"Dataset"`` or a model class)
or a concrete instance. Rules carrying conditions are only meaningful
against instances; for type-level checks they are skipped.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from catalog.features.permissions.actions import Action


ALL_SUBJECTS = "all"


def subject_name(subject: Any) -> str:
    """Resolve a subject (name, class or instance) to its subject type name."""
    if isinstance(subject, str):
        return subject
    cls = subject if isinstance(subject, type) else type(subject)
    return getattr(cls, "__subject__", cls.__name__)


def _is_instance(subject: Any) -> bool:
    return not isinstance(subject, (str, type))


def _field_value(instance: Any, field: str) -> Any:
    if isinstance(instance, Mapping):
        return instance.get(field)
    return getattr(instance, field, None)


@dataclass(frozen=True)
class Rule:
    """
    Grant (or, when ``inverted``, deny) ``action`` on ``subject``.

    ``conditions`` maps instance attribute names to the expected value. A
    frozenset, set or tuple expected value means "attribute is one of".
    """
    action: Action
    subject: str
    conditions: Optional[Mapping[str, Any]] = None
    inverted: bool = False

    def matches(self, action: Action, subject_type: str) -> bool:
        action_ok = self.action is Action.Manage or self.action == action
        subject_ok = self.subject == ALL_SUBJECTS or self.subject == subject_type
        return action_ok and subject_ok

    def matches_conditions(self, instance: Any) -> bool:
        if not self.conditions:
            return True
        for field, expected in self.conditions.items():
            value = _field_value(instance, field)
            if isinstance(expected, (frozenset, set, tuple)):
                if value not in expected:
                    return False
            elif value != expected:
                return False
        return True


class Ability:
    """
    Ordered, immutable set of rules compiled for one principal.

    The last rule matching an (action, subject) pair decides, so a later
    ``cannot`` overrides an earlier ``can``. No matching rule means deny.
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: tuple[Rule, ...] = tuple(rules)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def rules_for(self, action: Action, subject: Any) -> list[Rule]:
        """Rules relevant to ``action`` on ``subject``, in declaration order."""
        subject_type = subject_name(subject)
        return [rule for rule in self._rules if rule.matches(action, subject_type)]

    def can(self, action: Action, subject: Any) -> bool:
        subject_type = subject_name(subject)
        instance = subject if _is_instance(subject) else None

        for rule in reversed(self._rules):
            if not rule.matches(action, subject_type):
                continue
            if rule.conditions:
                # Ownership rules need the concrete document
                if instance is None or not rule.matches_conditions(instance):
                    continue
            return not rule.inverted
        return False

    def cannot(self, action: Action, subject: Any) -> bool:
        return not self.can(action, subject)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"<Ability(rules={len(self._rules)})>"


class AbilityBuilder:
    """
    Collect rules in declaration order and freeze them into an Ability.

    Usage:
        builder = AbilityBuilder()
        builder.can(Action.Manage, "Proposal")
        builder.cannot(Action.Delete, "Proposal")
        ability = builder.build()
    """

    def __init__(self):
        self._rules: list[Rule] = []

    def can(self, action: Action, subject: Any, conditions: Optional[Mapping[str, Any]] = None) -> Rule:
        return self._add(action, subject, conditions, inverted=False)

    def cannot(self, action: Action, subject: Any, conditions: Optional[Mapping[str, Any]] = None) -> Rule:
        return self._add(action, subject, conditions, inverted=True)

    def extend(self, rules: Iterable[Rule]) -> None:
        self._rules.extend(rules)

    def build(self) -> Ability:
        return Ability(self._rules)

    def _add(self, action, subject, conditions, inverted: bool) -> Rule:
        rule = Rule(
            action=action,
            subject=subject_name(subject),
            conditions=MappingProxyType(dict(conditions)) if conditions else None,
            inverted=inverted,
        )
        self._rules.append(rule)
        return rule
