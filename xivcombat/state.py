"""
Combat State Store
==================

The mutable snapshot of a combat session (cooldowns, resource pools, combo
token, statuses, cast, combat flag) and the store that owns it.

State changes only through ``CombatStore.dispatch`` with one of the events in
``xivcombat.events``. Expiry is never ticked: statuses, cooldowns, combo
tokens and animation locks record when they started, and the selectors compare
that against the store clock whenever they are read.
"""

import logging
import math
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from xivcombat.common import (
    ActionID,
    ActionType,
    CharacterStats,
    COMBO_WINDOW,
    RECAST_GROUP_GCD,
    RESOURCE_CAPS,
    RESOURCE_DEFAULTS,
    ResourceType,
    StatusID,
    calculate_recast_time,
)
from xivcombat.events import (
    ActionExecuted,
    AnimationLockStarted,
    BuffApplied,
    BuffRemoved,
    CastCleared,
    CastStarted,
    ComboBroken,
    ComboRemoved,
    ComboSet,
    CombatSet,
    CooldownExtended,
    CooldownStarted,
    DebuffApplied,
    DebuffRemoved,
    ResourceSet,
)
from xivcombat.task import Scheduler, Task

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CooldownRecord:
    """
    A running cooldown of a cooldown group.

    For charge-based groups the record covers the whole recharge window:
    ``duration`` can reach ``recast * max_charges``.

    Attributes:
        started_at (int): Time the current window was (re)started
        duration (int): Length of the window from ``started_at``
        recast (int): Recharge time of a single charge
        max_charges (int): Charge capacity of the group
    """

    started_at: int
    duration: int
    recast: int
    max_charges: int = 1

    def remaining(self, now: int) -> int:
        return max(0, self.started_at + self.duration - now)


@dataclass(frozen=True)
class CooldownState:
    """Read-only view of a cooldown group at a point in time."""

    group: int
    remaining: int
    duration: int
    recast: int
    charges: int
    max_charges: int

    @property
    def elapsed(self) -> int:
        return self.duration - self.remaining

    @property
    def progress(self) -> float:
        """Get the fraction of the cooldown that has elapsed"""
        if self.duration > 0:
            return self.elapsed / self.duration
        return 1.0


@dataclass(frozen=True)
class StatusInstance:
    """
    A buff or debuff applied at ``applied_at``.

    Attributes:
        status_id (StatusID): Status identifier
        duration (Optional[int]): Duration in milliseconds, None for infinite
        applied_at (int): Application time
        stacks (int): Stack count for stacking statuses
    """

    status_id: StatusID
    duration: Optional[int]
    applied_at: int
    stacks: int = 0

    def remaining(self, now: int) -> Optional[int]:
        if self.duration is None:
            return None
        return max(0, self.applied_at + self.duration - now)

    def is_expired(self, now: int) -> bool:
        return self.duration is not None and self.remaining(now) <= 0


@dataclass(frozen=True)
class ComboToken:
    action_id: ActionID
    set_at: int

    def is_expired(self, now: int) -> bool:
        return now - self.set_at >= COMBO_WINDOW


@dataclass(frozen=True)
class CastDescriptor:
    """The single in-flight cast."""

    action_id: ActionID
    cast_time: int
    started_at: int
    task: Task

    def remaining(self, now: int) -> int:
        return max(0, self.started_at + self.cast_time - now)


@dataclass
class CombatState:
    """
    Snapshot of everything the action engine reads and mutates.

    Attributes:
        stats (CharacterStats): Speed stats used by recast formulas
        cooldowns (Dict[int, CooldownRecord]): Running cooldowns by group
        animation_lock (Optional[CooldownRecord]): Current animation lock
        resources (Dict[ResourceType, int]): Resource pool amounts
        combo (Optional[ComboToken]): Pending combo token
        buffs (Dict[StatusID, StatusInstance]): Buffs on the character
        debuffs (Dict[StatusID, StatusInstance]): Debuffs on the target
        cast (Optional[CastDescriptor]): In-flight cast
        in_combat (bool): Whether a combat-entering action has resolved
    """

    stats: CharacterStats = field(default_factory=CharacterStats)
    cooldowns: Dict[int, CooldownRecord] = field(default_factory=dict)
    animation_lock: Optional[CooldownRecord] = None
    resources: Dict[ResourceType, int] = field(default_factory=lambda: dict(RESOURCE_DEFAULTS))
    combo: Optional[ComboToken] = None
    buffs: Dict[StatusID, StatusInstance] = field(default_factory=dict)
    debuffs: Dict[StatusID, StatusInstance] = field(default_factory=dict)
    cast: Optional[CastDescriptor] = None
    in_combat: bool = False

    @classmethod
    def create(cls, stats: Optional[CharacterStats] = None) -> "CombatState":
        return cls(stats=stats or CharacterStats())

    def check_invariants(self):
        """
        Verify the invariants a restored or replaced state must satisfy.

        Raises:
            ValueError: If a resource is out of bounds or a cooldown is malformed
        """
        for resource, amount in self.resources.items():
            cap = RESOURCE_CAPS.get(resource)
            if amount < 0 or (cap is not None and amount > cap):
                raise ValueError(f"Resource {resource.value} out of bounds: {amount}")

        for group, record in self.cooldowns.items():
            if record.duration < 0 or record.recast <= 0 or record.max_charges < 1:
                raise ValueError(f"Malformed cooldown for group {group}: {record}")
            if record.duration > record.recast * record.max_charges:
                raise ValueError(f"Cooldown for group {group} exceeds its charge capacity")


class CombatStore:
    """
    Owner of a ``CombatState``; the single point of state mutation.

    Listeners registered with ``subscribe`` are called with ``(event, store)``
    after each event has been applied, in registration order. An event
    dispatched from inside a listener is applied at once but only announced
    after every listener has seen the current one, so listeners receive
    events in history order.

    Attributes:
        clock (Scheduler): Source of the current time
        state (CombatState): Current state snapshot
        history (List[Tuple[int, object]]): Dispatched events with their time
    """

    def __init__(self, clock: Scheduler, state: Optional[CombatState] = None):
        self.clock = clock
        self.state = state or CombatState.create()
        self.history: List[Tuple[int, object]] = []
        self._listeners: List[Callable] = []
        self._pending: deque = deque()
        self._notifying = False
        self._handlers = {
            CooldownStarted: self._handle_cooldown_started,
            CooldownExtended: self._handle_cooldown_extended,
            AnimationLockStarted: self._handle_animation_lock,
            BuffApplied: self._handle_buff_applied,
            BuffRemoved: self._handle_buff_removed,
            DebuffApplied: self._handle_debuff_applied,
            DebuffRemoved: self._handle_debuff_removed,
            ResourceSet: self._handle_resource_set,
            ComboSet: self._handle_combo_set,
            ComboRemoved: self._handle_combo_removed,
            ComboBroken: self._handle_combo_broken,
            CastStarted: self._handle_cast_started,
            CastCleared: self._handle_cast_cleared,
            CombatSet: self._handle_combat_set,
            ActionExecuted: self._handle_action_executed,
        }

    # --- Dispatch ---

    def dispatch(self, event):
        """
        Apply an event to the state and notify listeners.

        Raises:
            TypeError: If the event type has no handler
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"Unknown combat event: {event!r}")

        handler(event)
        self.history.append((self.now, event))
        self._pending.append(event)
        if self._notifying:
            return

        self._notifying = True
        try:
            while self._pending:
                current = self._pending.popleft()
                for listener in list(self._listeners):
                    listener(current, self)
        finally:
            self._notifying = False
            self._pending.clear()

    def subscribe(self, listener: Callable):
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def replace(self, state: CombatState):
        """Swap the whole state, e.g. on an encounter reset."""
        state.check_invariants()
        self.state = state

    # --- Handlers ---

    def _handle_cooldown_started(self, event: CooldownStarted):
        if event.duration <= 0:
            self.state.cooldowns.pop(event.group, None)
            return

        self.state.cooldowns[event.group] = CooldownRecord(
            started_at=self.now,
            duration=event.duration,
            recast=event.duration,
            max_charges=max(1, event.max_charges),
        )

    def _handle_cooldown_extended(self, event: CooldownExtended):
        record = self.state.cooldowns.get(event.group)
        remaining = record.remaining(self.now) if record is not None else 0
        if record is None or remaining <= 0:
            max_charges = record.max_charges if record is not None else 1
            self._handle_cooldown_started(
                CooldownStarted(event.group, event.duration, max_charges)
            )
            return

        capacity = record.recast * record.max_charges
        self.state.cooldowns[event.group] = CooldownRecord(
            started_at=self.now,
            duration=min(capacity, remaining + event.duration),
            recast=record.recast,
            max_charges=record.max_charges,
        )

    def _handle_animation_lock(self, event: AnimationLockStarted):
        self.state.animation_lock = CooldownRecord(
            started_at=self.now,
            duration=max(0, event.duration),
            recast=max(1, event.duration),
        )

    def _handle_buff_applied(self, event: BuffApplied):
        self.state.buffs[event.status_id] = StatusInstance(
            event.status_id, event.duration, self.now, event.stacks
        )

    def _handle_buff_removed(self, event: BuffRemoved):
        self.state.buffs.pop(event.status_id, None)

    def _handle_debuff_applied(self, event: DebuffApplied):
        self.state.debuffs[event.status_id] = StatusInstance(
            event.status_id, event.duration, self.now, event.stacks
        )

    def _handle_debuff_removed(self, event: DebuffRemoved):
        self.state.debuffs.pop(event.status_id, None)

    def _handle_resource_set(self, event: ResourceSet):
        amount = max(0, event.amount)
        cap = RESOURCE_CAPS.get(event.resource)
        if cap is not None:
            amount = min(cap, amount)
        self.state.resources[event.resource] = amount

    def _handle_combo_set(self, event: ComboSet):
        self.state.combo = ComboToken(event.action_id, self.now)

    def _handle_combo_removed(self, event: ComboRemoved):
        if self.state.combo is not None and self.state.combo.action_id == event.action_id:
            self.state.combo = None

    def _handle_combo_broken(self, _event: ComboBroken):
        self.state.combo = None

    def _handle_cast_started(self, event: CastStarted):
        self.state.cast = CastDescriptor(
            action_id=event.action_id,
            cast_time=event.cast_time,
            started_at=self.now,
            task=event.task,
        )

    def _handle_cast_cleared(self, _event: CastCleared):
        self.state.cast = None

    def _handle_combat_set(self, event: CombatSet):
        self.state.in_combat = event.in_combat

    def _handle_action_executed(self, _event: ActionExecuted):
        pass

    # --- Selectors ---

    @property
    def now(self) -> int:
        return self.clock.current_time

    @property
    def in_combat(self) -> bool:
        return self.state.in_combat

    @property
    def stats(self) -> CharacterStats:
        return self.state.stats

    def _live_status(self, statuses: Dict[StatusID, StatusInstance], status_id: StatusID):
        status = statuses.get(status_id)
        if status is None or status.is_expired(self.now):
            return None
        return status

    def has_buff(self, status_id: StatusID) -> bool:
        return self._live_status(self.state.buffs, status_id) is not None

    def buff_remaining(self, status_id: StatusID) -> Optional[int]:
        """Remaining buff duration: 0 when absent, None when infinite."""
        status = self._live_status(self.state.buffs, status_id)
        if status is None:
            return 0
        return status.remaining(self.now)

    def buff_stacks(self, status_id: StatusID) -> int:
        status = self._live_status(self.state.buffs, status_id)
        return status.stacks if status is not None else 0

    def active_buffs(self) -> List[StatusInstance]:
        return [s for s in self.state.buffs.values() if not s.is_expired(self.now)]

    def has_debuff(self, status_id: StatusID) -> bool:
        return self._live_status(self.state.debuffs, status_id) is not None

    def debuff_remaining(self, status_id: StatusID) -> Optional[int]:
        status = self._live_status(self.state.debuffs, status_id)
        if status is None:
            return 0
        return status.remaining(self.now)

    def active_debuffs(self) -> List[StatusInstance]:
        return [s for s in self.state.debuffs.values() if not s.is_expired(self.now)]

    def resource(self, resource: ResourceType) -> int:
        return self.state.resources.get(resource, 0)

    def resource_cap(self, resource: ResourceType) -> Optional[int]:
        return RESOURCE_CAPS.get(resource)

    def has_combo(self, action_id: ActionID) -> bool:
        """Check whether ``action_id`` is the pending combo token."""
        return self.combo_action == action_id

    @property
    def combo_action(self) -> Optional[ActionID]:
        combo = self.state.combo
        if combo is None or combo.is_expired(self.now):
            return None
        return combo.action_id

    def cooldown_state(self, group: int) -> Optional[CooldownState]:
        """
        Get the view of a cooldown group.

        Returns:
            Optional[CooldownState]: None when the group is idle (all charges ready)
        """
        record = self.state.cooldowns.get(group)
        if record is None:
            return None

        remaining = record.remaining(self.now)
        if remaining <= 0:
            return None

        charges = record.max_charges - math.ceil(remaining / record.recast)
        return CooldownState(
            group=group,
            remaining=remaining,
            duration=record.duration,
            recast=record.recast,
            charges=min(record.max_charges, max(0, charges)),
            max_charges=record.max_charges,
        )

    def cooldown_remaining(self, group: int) -> int:
        cooldown = self.cooldown_state(group)
        return cooldown.remaining if cooldown is not None else 0

    def charges(self, group: int, max_charges: int) -> int:
        cooldown = self.cooldown_state(group)
        return cooldown.charges if cooldown is not None else max_charges

    @property
    def gcd_remaining(self) -> int:
        return self.cooldown_remaining(RECAST_GROUP_GCD)

    @property
    def animation_lock_remaining(self) -> int:
        lock = self.state.animation_lock
        return lock.remaining(self.now) if lock is not None else 0

    @property
    def is_animation_locked(self) -> bool:
        return self.animation_lock_remaining > 0

    @property
    def cast(self) -> Optional[CastDescriptor]:
        return self.state.cast

    @property
    def is_casting(self) -> bool:
        return self.state.cast is not None

    @property
    def cast_remaining(self) -> int:
        cast = self.state.cast
        return cast.remaining(self.now) if cast is not None else 0

    def recast_time(self, base: int, action_type: ActionType) -> int:
        """Reduce a duration by the speed stat matching the action category."""
        stats = self.state.stats
        if action_type == ActionType.WEAPONSKILL:
            return calculate_recast_time(base, stats.skill_speed, stats.level)
        if action_type == ActionType.SPELL:
            return calculate_recast_time(base, stats.spell_speed, stats.level)
        return base
