"""
Action Definition Engine
========================

Turns a declarative ``CombatActionOptions`` plus the catalog row of an action
into an executable ``CombatAction``.

Every public method of ``CombatAction`` is a pure read over a ``CombatStore``
except ``execute``, which runs the execute protocol:

1. snapshot the cast time,
2. consume the combo predecessor token, or break any pending combo,
3. start the extra cooldown,
4. start (or, for charge-based actions, extend) the action's own cooldown,
5. lock the global cooldown for GCD actions,
6. resolve immediately, or after the cast time through the session scheduler.

Resolution enters combat, pays the cost, runs the job-specific effect
callback and finally emits ``ActionExecuted``.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Tuple

from xivcombat.catalog import ActionCatalog, CatalogEntry
from xivcombat.common import (
    ANIMATION_LOCK,
    CAST_SKIP_STATUS,
    GCD_MAX,
    RECAST_GROUP_GCD,
    RECAST_GROUP_NONE,
    ActionID,
    ActionType,
    ResourceType,
)
from xivcombat.events import (
    ActionExecuted,
    AnimationLockStarted,
    BuffRemoved,
    CastCleared,
    CastStarted,
    ComboBroken,
    ComboRemoved,
    CombatSet,
    CooldownExtended,
    CooldownStarted,
    ResourceSet,
)
from xivcombat.state import CombatStore, CooldownState

if TYPE_CHECKING:
    from xivcombat.session import CombatSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtraCooldown:
    """A synthetic cooldown attached to a single action (group >= 1000)."""

    cooldown_group: int
    duration: int


@dataclass
class ExecuteContext:
    """
    Facts about one execution, handed to the effect callback.

    Attributes:
        comboed (bool): The combo predecessor token was pending and consumed
        cost (int): Resource cost actually paid at resolution
    """

    comboed: bool = False
    cost: int = 0


def _no_effect(store: CombatStore, context: ExecuteContext):
    pass


def _always(store: CombatStore) -> bool:
    return True


def _never(store: CombatStore) -> bool:
    return False


@dataclass
class CombatActionOptions:
    """
    Declarative definition of an action's behaviour.

    Attributes:
        action_id: Action being defined; must have a catalog row
        execute: Effect callback run at resolution. Default: no effect
        is_usable: Action-specific usability predicate. Default: always usable
        is_glowing: "Ready to press" highlight predicate. Default: never glows
        redirect: Identifier this button stands for right now. Default: ``action_id``
        cooldown: Recast time in milliseconds. Default: catalog recast time
        max_charges: Charge capacity. Default: catalog max charges
        extra_cooldown: Synthetic cooldown started on use. Default: none
        cast_time: Cast time in milliseconds. Default: catalog cast time
        cost: Resource cost. Default: catalog cost
        enters_combat: Resolving the action sets the combat flag. Default: True
        reduced_by_skill_speed: Weaponskill recast scales with skill speed. Default: False
        reduced_by_spell_speed: Spell cast and recast scale with spell speed. Default: False
        is_gcd_action: Consumes the global cooldown. Default: weaponskills and spells
        skip_default_cost_check: Usability ignores the resource pool. Default: False
        animation_lock: Global cooldown lock for GCD actions. Default: ANIMATION_LOCK
    """

    action_id: ActionID
    execute: Callable[[CombatStore, ExecuteContext], None] = _no_effect
    is_usable: Callable[[CombatStore], bool] = _always
    is_glowing: Callable[[CombatStore], bool] = _never
    redirect: Optional[Callable[[CombatStore], ActionID]] = None
    cooldown: Optional[Callable[[CombatStore], int]] = None
    max_charges: Optional[Callable[[CombatStore], int]] = None
    extra_cooldown: Optional[Callable[[CombatStore], Optional[ExtraCooldown]]] = None
    cast_time: Optional[Callable[[CombatStore], int]] = None
    cost: Optional[Callable[[CombatStore], int]] = None
    enters_combat: bool = True
    reduced_by_skill_speed: bool = False
    reduced_by_spell_speed: bool = False
    is_gcd_action: Optional[bool] = None
    skip_default_cost_check: bool = False
    animation_lock: Optional[int] = None


def start_global_cooldown(store: CombatStore, reduced_by_skill_speed: bool = False):
    """Start the shared global cooldown for actions whose own group is not the GCD."""
    recast = GCD_MAX
    if reduced_by_skill_speed:
        recast = store.recast_time(GCD_MAX, ActionType.WEAPONSKILL)
    store.dispatch(CooldownStarted(RECAST_GROUP_GCD, recast))


def ogcd_lock(store: CombatStore, duration: int = ANIMATION_LOCK):
    """Lock the character for the animation of an off-GCD action."""
    store.dispatch(AnimationLockStarted(duration))


class CombatAction:
    """
    Executable action built from options and the action's catalog row.

    Attributes:
        action_id (ActionID): Identifier of the action
        entry (CatalogEntry): Static attributes of the action
        options (CombatActionOptions): Behaviour hooks
    """

    def __init__(self, options: CombatActionOptions, catalog: ActionCatalog):
        """
        Build an action.

        Raises:
            MissingCatalogEntryError: If the action has no catalog row
        """
        self.action_id = options.action_id
        self.entry: CatalogEntry = catalog.get(options.action_id)
        self.options = options

    def __repr__(self):
        return f"CombatAction({self.entry.name})"

    @property
    def is_gcd_action(self) -> bool:
        if self.options.is_gcd_action is not None:
            return self.options.is_gcd_action
        return self.entry.is_gcd

    # --- Reads ---

    def is_usable(self, store: CombatStore) -> bool:
        entry = self.entry
        if (
            entry.cost_type is not None
            and entry.cost_type != ResourceType.UNKNOWN
            and not self.options.skip_default_cost_check
            and store.resource(entry.cost_type) < entry.cost
        ):
            return False

        return self.options.is_usable(store)

    def is_glowing(self, store: CombatStore) -> bool:
        return self.options.is_glowing(store)

    def redirect(self, store: CombatStore) -> ActionID:
        if self.options.redirect is None:
            return self.action_id
        return self.options.redirect(store)

    def cooldown(self, store: CombatStore) -> int:
        """Current full recast time of the action in milliseconds."""
        if self.options.cooldown is not None:
            base_recast = self.options.cooldown(store)
        else:
            base_recast = self.entry.recast_time

        action_type = self.entry.action_type
        if (self.options.reduced_by_skill_speed and action_type == ActionType.WEAPONSKILL) or (
            self.options.reduced_by_spell_speed and action_type == ActionType.SPELL
        ):
            return store.recast_time(base_recast, action_type)

        return base_recast

    def cast_time(self, store: CombatStore) -> int:
        """Current cast time in milliseconds. Reading it never consumes a status."""
        if store.has_buff(CAST_SKIP_STATUS):
            return 0

        if self.options.cast_time is not None:
            base_cast = self.options.cast_time(store)
        else:
            base_cast = self.entry.cast_time

        if self.options.reduced_by_spell_speed:
            return store.recast_time(base_cast, ActionType.SPELL)

        return base_cast

    def max_charges(self, store: CombatStore) -> int:
        if self.options.max_charges is not None:
            return self.options.max_charges(store)
        return self.entry.max_charges

    def cost(self, store: CombatStore) -> int:
        if self.options.cost is not None:
            return self.options.cost(store)
        return self.entry.cost

    def extra_cooldown(self, store: CombatStore) -> Optional[ExtraCooldown]:
        if self.options.extra_cooldown is None:
            return None
        return self.options.extra_cooldown(store)

    def get_cooldown(
        self, store: CombatStore
    ) -> Tuple[Optional[CooldownState], Optional[CooldownState], Optional[CooldownState]]:
        """
        Get the cooldown views relevant to this action.

        Returns:
            tuple: (own group, global cooldown, extra cooldown); each is None
                   when it does not apply or is idle
        """
        cooldown = None
        global_cooldown = None
        extra_cooldown = None

        group = self.entry.cooldown_group
        if group not in (RECAST_GROUP_GCD, RECAST_GROUP_NONE):
            cooldown = store.cooldown_state(group)

        if self.is_gcd_action:
            global_cooldown = store.cooldown_state(RECAST_GROUP_GCD)

        extra = self.extra_cooldown(store)
        if extra is not None:
            extra_cooldown = store.cooldown_state(extra.cooldown_group)

        return cooldown, global_cooldown, extra_cooldown

    def charges(self, store: CombatStore) -> int:
        """Number of uses available right now."""
        return store.charges(self.entry.cooldown_group, self.max_charges(store))

    def is_ready(self, store: CombatStore) -> bool:
        """Check that none of the action's cooldowns blocks a use right now."""
        cooldown, global_cooldown, extra_cooldown = self.get_cooldown(store)
        if cooldown is not None and cooldown.charges < 1:
            return False
        if global_cooldown is not None and global_cooldown.remaining > 0:
            return False
        if extra_cooldown is not None and extra_cooldown.remaining > 0:
            return False
        return True

    def ready_in(self, store: CombatStore) -> int:
        """Milliseconds until ``is_ready`` holds, ignoring locks and casts."""
        cooldown, global_cooldown, extra_cooldown = self.get_cooldown(store)
        wait = 0
        if cooldown is not None and cooldown.charges < 1:
            wait = max(wait, cooldown.remaining - (cooldown.max_charges - 1) * cooldown.recast)
        if global_cooldown is not None:
            wait = max(wait, global_cooldown.remaining)
        if extra_cooldown is not None:
            wait = max(wait, extra_cooldown.remaining)
        return wait

    # --- Execute protocol ---

    def execute(self, session: "CombatSession") -> bool:
        """
        Perform the action.

        Returns immediately. Effects are visible synchronously for instant
        actions, or once the cast time has elapsed on the session scheduler.

        Args:
            session: Session owning the store and scheduler

        Returns:
            bool: False if the attempt was dropped without touching state
        """
        store = session.store
        entry = self.entry

        if not self.is_usable(store):
            logger.warning("%s executed while unusable, ignoring", entry.name)
            return False

        if self.max_charges(store) > 1 and self.charges(store) < 1:
            logger.warning("%s executed without a charge left, ignoring", entry.name)
            return False

        cast_time = self.cast_time(store)
        cast_skip_active = store.has_buff(CAST_SKIP_STATUS)

        if cast_time > 0 and store.is_casting:
            logger.warning(
                "%s requested while casting %s, ignoring", entry.name, store.cast.action_id.name
            )
            return False

        context = ExecuteContext()

        if entry.combo_action is not None and store.has_combo(entry.combo_action):
            context.comboed = True
            store.dispatch(ComboRemoved(entry.combo_action))

        if not entry.preserves_combo:
            store.dispatch(ComboBroken())

        extra = self.extra_cooldown(store)
        if extra is not None:
            store.dispatch(CooldownStarted(extra.cooldown_group, extra.duration))

        max_charges = self.max_charges(store)
        if entry.cooldown_group != RECAST_GROUP_NONE:
            if max_charges > 1 and self.get_cooldown(store)[0] is not None:
                store.dispatch(CooldownExtended(entry.cooldown_group, self.cooldown(store)))
            else:
                store.dispatch(
                    CooldownStarted(entry.cooldown_group, self.cooldown(store), max_charges)
                )

        if self.is_gcd_action:
            lock = self.options.animation_lock
            store.dispatch(AnimationLockStarted(lock if lock is not None else ANIMATION_LOCK))

        def resolve():
            if not store.in_combat and self.options.enters_combat:
                store.dispatch(CombatSet(True))

            cost = self.cost(store)
            if cost and entry.cost_type is not None and entry.cost_type != ResourceType.UNKNOWN:
                available = store.resource(entry.cost_type)
                if cost > available:
                    logger.warning(
                        "%s costs %d %s but only %d left, skipping payment",
                        entry.name, cost, entry.cost_type.value, available,
                    )
                    cost = 0
                else:
                    store.dispatch(ResourceSet(entry.cost_type, available - cost))
            context.cost = cost

            self.options.execute(store, context)

            logger.debug("%s resolved (comboed=%s, cost=%d)", entry.name, context.comboed, cost)
            store.dispatch(ActionExecuted(self.action_id))

        if cast_time == 0:
            if cast_skip_active:
                store.dispatch(BuffRemoved(CAST_SKIP_STATUS))
            resolve()
        else:
            def finish_cast():
                cast = store.cast
                if cast is None or cast.task is not task:
                    return
                store.dispatch(CastCleared())
                resolve()

            task = session.scheduler.schedule_task(cast_time, finish_cast)
            store.dispatch(CastStarted(self.action_id, cast_time, task))
            logger.debug("%s casting for %dms", entry.name, cast_time)

        return True
