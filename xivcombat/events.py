"""Named mutation events.

Combat state only changes by dispatching one of these events to a
``CombatStore``. Durations are in milliseconds; a status duration of ``None``
means the status never expires.
"""

from dataclasses import dataclass
from typing import Any, Optional

from xivcombat.common import ActionID, ResourceType, StatusID


@dataclass(frozen=True)
class CooldownStarted:
    group: int
    duration: int
    max_charges: int = 1


@dataclass(frozen=True)
class CooldownExtended:
    """Consume a charge by pushing an active recharge window further out."""

    group: int
    duration: int


@dataclass(frozen=True)
class AnimationLockStarted:
    duration: int


@dataclass(frozen=True)
class BuffApplied:
    status_id: StatusID
    duration: Optional[int]
    stacks: int = 0


@dataclass(frozen=True)
class BuffRemoved:
    status_id: StatusID


@dataclass(frozen=True)
class DebuffApplied:
    status_id: StatusID
    duration: Optional[int]
    stacks: int = 0


@dataclass(frozen=True)
class DebuffRemoved:
    status_id: StatusID


@dataclass(frozen=True)
class ResourceSet:
    resource: ResourceType
    amount: int


@dataclass(frozen=True)
class ComboSet:
    action_id: ActionID


@dataclass(frozen=True)
class ComboRemoved:
    action_id: ActionID


@dataclass(frozen=True)
class ComboBroken:
    pass


@dataclass(frozen=True)
class CastStarted:
    action_id: ActionID
    cast_time: int
    task: Any


@dataclass(frozen=True)
class CastCleared:
    pass


@dataclass(frozen=True)
class CombatSet:
    in_combat: bool


@dataclass(frozen=True)
class ActionExecuted:
    """Terminal event emitted once an action has fully resolved."""

    action_id: ActionID
