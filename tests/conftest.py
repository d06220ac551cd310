"""Shared fixtures: a small synthetic kit and a Gunbreaker session."""

import pytest

from xivcombat.catalog import ActionCatalog, CatalogEntry
from xivcombat.common import ActionID, ActionType, JobClass, ResourceType, StatusID
from xivcombat.core import CombatActionOptions
from xivcombat.events import BuffApplied, ComboSet
from xivcombat.session import CombatSession, create_session
from xivcombat.state import CombatState, CombatStore
from xivcombat.task import Scheduler

# Real ids reused as opaque keys for synthetic rows
OPENER = ActionID.KEEN_EDGE
FOLLOW = ActionID.BRUTAL_SHELL
SPELL = ActionID.LIGHTNING_SHOT
CHARGED = ActionID.ROUGH_DIVIDE
SWIFTCAST = ActionID.SWIFTCAST
ABILITY = ActionID.NO_MERCY


def make_catalog():
    return ActionCatalog([
        CatalogEntry(OPENER, "Opener", ActionType.WEAPONSKILL, recast_time=2500, cooldown_group=1),
        CatalogEntry(FOLLOW, "Follow", ActionType.ABILITY, combo_action=OPENER),
        CatalogEntry(
            SPELL, "Spell", ActionType.SPELL,
            cost=2000, cost_type=ResourceType.MANA, cast_time=2000, recast_time=2500, cooldown_group=58,
        ),
        CatalogEntry(CHARGED, "Charged", ActionType.ABILITY, recast_time=1000, cooldown_group=9, max_charges=2),
        CatalogEntry(SWIFTCAST, "Swiftcast", ActionType.ABILITY, recast_time=60_000, cooldown_group=45),
        CatalogEntry(ABILITY, "Ability", ActionType.ABILITY, recast_time=60_000, cooldown_group=10,
                     preserves_combo=True),
    ])


class Recorder:
    """Effect callback that remembers every context it was called with."""

    def __init__(self, effect=None):
        self.contexts = []
        self.effect = effect

    def __call__(self, store, context):
        self.contexts.append(context)
        if self.effect is not None:
            self.effect(store, context)


@pytest.fixture
def recorders():
    return {
        OPENER: Recorder(lambda store, _ctx: store.dispatch(ComboSet(OPENER))),
        FOLLOW: Recorder(),
        SPELL: Recorder(),
        CHARGED: Recorder(),
        SWIFTCAST: Recorder(lambda store, _ctx: store.dispatch(BuffApplied(StatusID.SWIFTCAST, 10_000))),
        ABILITY: Recorder(),
    }


@pytest.fixture
def session(recorders):
    actions = [
        CombatActionOptions(action_id=action_id, execute=recorder)
        for action_id, recorder in recorders.items()
    ]
    return CombatSession(make_catalog(), actions)


@pytest.fixture
def store():
    return CombatStore(Scheduler(), CombatState.create())


@pytest.fixture
def gnb():
    return create_session(JobClass.GUNBREAKER)
