"""
Policy guards for route protection.

Implements:
- Route-level policy checks against a freshly compiled Ability
- Instance-level checks for ownership-scoped actions
"""
from typing import Annotated, Any, Callable, Iterable, Union
from fastapi import Depends, HTTPException, status

from catalog.features.permissions.ability import Ability, subject_name
from catalog.features.permissions.actions import Action
from catalog.features.permissions.factory import build_ability_for
from catalog.features.users.dependencies import get_current_principal
from catalog.features.users.models import Principal
from catalog.utils import get_logger


log = get_logger(__name__)

PolicyHandler = Callable[[Ability], bool]


class AuthorizationDenied(HTTPException):
    """403 raised by the guards. The body never names the failing rule."""

    def __init__(self):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden resource")


class Policy:
    """Predicate requiring ``action`` on ``subject``: ``Policy(...)(ability) -> bool``."""

    def __init__(self, action: Action, subject: Any):
        self.action = action
        self.subject = subject

    def __call__(self, ability: Ability) -> bool:
        return ability.can(self.action, self.subject)

    def __repr__(self) -> str:
        return f"<Policy({self.action.value} {subject_name(self.subject)})>"


def policy(action: Action, subject: Any) -> Policy:
    return Policy(action, subject)


def _describe(principal: Principal) -> str:
    return "anonymous caller" if principal.is_anonymous else f"principal {principal.id}"


def evaluate_policies(ability: Ability, handlers: Iterable[PolicyHandler]) -> PolicyHandler | None:
    """
    Evaluate ``handlers`` in order, stopping at the first that fails.

    Returns the failing handler, or None when all of them pass.
    """
    for handler in handlers:
        if not handler(ability):
            return handler
    return None


def check_policies(*handlers: Union[PolicyHandler, tuple[Action, Any]]):
    """
    FastAPI dependency requiring every policy to hold for the current principal.

    Policies are fixed when the route is declared and evaluated on each
    request against a newly built Ability. With no policies the request
    always proceeds. The Ability is returned for reuse in the handler.

    Usage:
        @router.post("", dependencies=[Depends(check_policies(policy(Action.Create, "Proposal")))])
        async def create_proposal(...):
            pass

    Raises:
        AuthorizationDenied: 403 if any policy evaluates false
    """
    policies: tuple[PolicyHandler, ...] = tuple(
        handler if callable(handler) else Policy(*handler) for handler in handlers
    )

    async def policies_guard(
        principal: Annotated[Principal, Depends(get_current_principal)]
    ) -> Ability:
        ability = build_ability_for(principal)
        failed = evaluate_policies(ability, policies)
        if failed is not None:
            log.info("Denied %s for %s", failed, _describe(principal))
            raise AuthorizationDenied()
        return ability

    policies_guard.policies = policies
    return policies_guard


def check_instance_policy(action: Union[Action, tuple[Action, ...]], loader: Callable[..., Any]):
    """
    FastAPI dependency checking ``action`` against one loaded resource.

    A tuple of actions passes when any one of them is granted, e.g.
    ``(Action.ReadAll, Action.ReadOwn)`` for "every dataset, or those of my
    groups".

    ``loader`` is itself a dependency (e.g. fetch by path id, 404 when
    missing). The check runs before the handler body, so a denial never
    follows a write. The loaded instance is returned to the handler.

    Usage:
        @router.patch("/{pid}")
        async def update_dataset(
            dataset: Annotated[Dataset, Depends(check_instance_policy(Action.Update, get_dataset_or_404))],
        ):
            pass
    """
    actions = action if isinstance(action, tuple) else (action,)

    async def instance_guard(
        principal: Annotated[Principal, Depends(get_current_principal)],
        instance: Any = Depends(loader),
    ) -> Any:
        ability = build_ability_for(principal)
        if not any(ability.can(granted, instance) for granted in actions):
            log.info(
                "Denied %s on %s for %s",
                "|".join(granted.value for granted in actions), subject_name(instance), _describe(principal),
            )
            raise AuthorizationDenied()
        return instance

    return instance_guard
