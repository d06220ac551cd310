"""
Combat session: one character's store, scheduler, actions and follow-up rules.

The session is the caller-side layer of the engine. It resolves pressed
buttons through ``redirect``, checks usability and cooldowns before invoking
``execute``, and owns the clock that deferred casts are scheduled on.
Sessions share nothing, so several can be simulated side by side.
"""

import logging
from typing import Callable, Dict, Iterable, Optional

from xivcombat.catalog import ActionCatalog
from xivcombat.common import ActionID, CharacterStats, JobClass
from xivcombat.core import CombatAction, CombatActionOptions
from xivcombat.events import CastCleared
from xivcombat.followup import FollowUpLayer, FollowUpRule
from xivcombat.job import get_job_kit
from xivcombat.state import CombatState, CombatStore
from xivcombat.task import Scheduler

logger = logging.getLogger(__name__)


class CombatSession:
    """
    Simulation environment for a single character.

    Attributes:
        catalog (ActionCatalog): Static action data
        scheduler (Scheduler): Clock and deferred task queue
        store (CombatStore): Combat state owner
        followups (FollowUpLayer): Reactive rules attached to the store
        actions (Dict[ActionID, CombatAction]): Executable actions by id
        stats (CharacterStats): Stats the state is created with
    """

    def __init__(
        self,
        catalog: ActionCatalog,
        actions: Iterable[CombatActionOptions],
        rules: Iterable[FollowUpRule] = (),
        stats: Optional[CharacterStats] = None,
        time: int = 0,
    ):
        """
        Build a session.

        Raises:
            MissingCatalogEntryError: If an action or combo predecessor has no catalog row
            ValueError: If an action is defined twice
        """
        self.catalog = catalog
        self.stats = stats or CharacterStats()
        self.scheduler = Scheduler(time=time)
        self.store = CombatStore(self.scheduler, CombatState.create(self.stats))

        self.actions: Dict[ActionID, CombatAction] = {}
        for options in actions:
            if options.action_id in self.actions:
                raise ValueError(f"Action {options.action_id!r} defined twice")
            self.actions[options.action_id] = CombatAction(options, catalog)
        catalog.validate(self.actions)

        self.followups = FollowUpLayer(catalog, rules)
        self.followups.attach(self.store)

    @property
    def current_time(self) -> int:
        return self.scheduler.current_time

    def subscribe(self, listener: Callable):
        """Observe committed events, delivered in history order."""
        self.store.subscribe(listener)

    def action(self, action_id: ActionID) -> CombatAction:
        action = self.actions.get(action_id)
        if action is None:
            raise KeyError(f"No action definition for {action_id!r}")
        return action

    def resolve(self, action_id: ActionID) -> ActionID:
        """Resolve the identifier a button stands for right now."""
        return self.action(action_id).redirect(self.store)

    def can_use(self, action_id: ActionID) -> bool:
        """Check whether the (already redirected) action may be executed now."""
        action = self.action(action_id)
        store = self.store
        if store.is_casting or store.is_animation_locked:
            return False
        return action.is_ready(store) and action.is_usable(store)

    def use_action(self, action_id: ActionID) -> bool:
        """
        Press a button: redirect it, check it, then execute it.

        Returns:
            bool: True if an action was executed
        """
        resolved = self.resolve(action_id)
        if resolved not in self.actions:
            logger.warning("%s redirects to undefined action %s", action_id, resolved)
            return False

        if not self.can_use(resolved):
            logger.debug("%s is not usable at %d", resolved.name, self.current_time)
            return False

        return self.action(resolved).execute(self)

    def next_ready_time(self, action_id: ActionID) -> int:
        """Earliest time at which the button's current action could become usable."""
        action = self.action(self.resolve(action_id))
        store = self.store
        wait = max(store.cast_remaining, store.animation_lock_remaining, action.ready_in(store))
        return self.current_time + wait

    def interrupt(self) -> bool:
        """
        Interrupt the in-flight cast. The interrupted action never resolves.

        Returns:
            bool: True if a cast was interrupted
        """
        cast = self.store.cast
        if cast is None:
            return False

        cast.task.cancel()
        self.store.dispatch(CastCleared())
        logger.debug("cast of %s interrupted", cast.action_id.name)
        return True

    def step(self, frame_delta: int):
        self.scheduler.step(frame_delta)

    def advance_to(self, time: int):
        self.scheduler.advance_to(time)

    def reset(self):
        """
        Replace the combat state wholesale, dropping any pending cast.

        The event history is a run log and is cleared as well.
        """
        cast = self.store.cast
        if cast is not None:
            cast.task.cancel()
        self.store.replace(CombatState.create(self.stats))
        self.store.history.clear()


def create_session(
    job: JobClass, stats: Optional[CharacterStats] = None, time: int = 0
) -> CombatSession:
    """
    Build a session for a registered job kit.

    Args:
        job: Job whose kit should be loaded
        stats: Character stats, defaults to base stats for the job
        time: Start time in milliseconds

    Returns:
        CombatSession: Ready-to-use session
    """
    kit = get_job_kit(job)
    if stats is None:
        stats = CharacterStats(job=job)

    return CombatSession(
        catalog=ActionCatalog(kit.catalog),
        actions=kit.actions,
        rules=kit.rules,
        stats=stats,
        time=time,
    )
