"""Reactive follow-up rules.

A rule watches the ``ActionExecuted`` events of a store and, when the executed
action passes its guard and the committed state passes its condition, emits
one corrective event. Rules run synchronously in registration order. Events
the layer emits itself, including any ``ActionExecuted`` a rule might build,
are not fed back into it.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from xivcombat.catalog import ActionCatalog, CatalogEntry
from xivcombat.common import ActionID, ActionType, StatusID
from xivcombat.events import ActionExecuted, BuffRemoved
from xivcombat.state import CombatStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FollowUpRule:
    """
    A (guard, condition, effect) triple.

    Attributes:
        name: Rule name used in diagnostics
        guard: Predicate over the catalog row of the executed action
        condition: Predicate over the committed state
        effect: Builds the corrective event to dispatch
    """

    name: str
    guard: Callable[[CatalogEntry], bool]
    condition: Callable[[CombatStore], bool]
    effect: Callable[[CombatStore], object]


def lapse_unless_followed_by(
    status_id: StatusID,
    follow_up: ActionID,
    action_type: ActionType = ActionType.WEAPONSKILL,
) -> FollowUpRule:
    """
    Build a rule for a buff that only lasts until the next action of a category.

    Any action of ``action_type`` other than ``follow_up`` removes the buff.

    Args:
        status_id: Buff granted as a direct follow-up window
        follow_up: Action that granted the buff and may be followed by it
        action_type: Category of actions that close the window
    """
    return FollowUpRule(
        name=f"lapse_{status_id.name.lower()}",
        guard=lambda entry: entry.action_type == action_type and entry.action_id != follow_up,
        condition=lambda store: store.has_buff(status_id),
        effect=lambda store: BuffRemoved(status_id),
    )


class FollowUpLayer:
    """
    Ordered list of follow-up rules attached to a store.

    Attributes:
        catalog (ActionCatalog): Catalog used to look up executed actions
        rules (List[FollowUpRule]): Registered rules, in evaluation order
    """

    def __init__(self, catalog: ActionCatalog, rules: Iterable[FollowUpRule] = ()):
        self.catalog = catalog
        self.rules: List[FollowUpRule] = list(rules)
        self._store: Optional[CombatStore] = None
        self._emitted: List[object] = []

    def register(self, rule: FollowUpRule):
        self.rules.append(rule)

    def attach(self, store: CombatStore):
        """Subscribe to a store, detaching from the previous one."""
        if self._store is not None:
            self._store.unsubscribe(self.on_event)
        self._store = store
        store.subscribe(self.on_event)

    def on_event(self, event, store: CombatStore):
        for index, own in enumerate(self._emitted):
            if own is event:
                del self._emitted[index]
                return

        if not isinstance(event, ActionExecuted):
            return

        entry = self.catalog.get(event.action_id)
        for rule in self.rules:
            if rule.guard(entry) and rule.condition(store):
                logger.debug("follow-up %s fired after %s", rule.name, entry.name)
                follow_up = rule.effect(store)
                self._emitted.append(follow_up)
                store.dispatch(follow_up)
