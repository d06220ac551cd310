"""
Role and general actions shared between jobs.

Each group is a list of catalog rows plus the matching action definitions,
so a job kit can pull in the groups that apply to its role.
"""

from xivcombat.catalog import CatalogEntry
from xivcombat.common import ActionID, ActionType, StatusID
from xivcombat.core import CombatActionOptions, ogcd_lock
from xivcombat.events import BuffApplied, DebuffApplied


def _buff_ability(status_id: StatusID, duration: int):
    def execute(store, _context):
        ogcd_lock(store)
        store.dispatch(BuffApplied(status_id, duration))

    return execute


def _ability(action_id, name, recast_time, cooldown_group, action_type=ActionType.ABILITY):
    return CatalogEntry(
        action_id, name, action_type, recast_time=recast_time, cooldown_group=cooldown_group,
        preserves_combo=True,
    )


# General actions
COMMON_CATALOG = [
    _ability(ActionID.POTION, "Potion", 270_000, 59, ActionType.OTHER),
    _ability(ActionID.SPRINT, "Sprint", 60_000, 55),
]

COMMON_ACTIONS = [
    CombatActionOptions(
        action_id=ActionID.POTION,
        execute=_buff_ability(StatusID.MEDICATED, 30_000),
        enters_combat=False,
    ),
    CombatActionOptions(
        action_id=ActionID.SPRINT,
        execute=_buff_ability(StatusID.SPRINT, 10_000),
        enters_combat=False,
    ),
]


# Role actions - Tank
TANK_CATALOG = [
    _ability(ActionID.RAMPART, "Rampart", 90_000, 46),
    _ability(ActionID.PROVOKE, "Provoke", 30_000, 42),
    _ability(ActionID.REPRISAL, "Reprisal", 60_000, 44),
    _ability(ActionID.ARMS_LENGTH, "Arm's Length", 120_000, 48),
]


def _reprisal(store, _context):
    ogcd_lock(store)
    store.dispatch(DebuffApplied(StatusID.REPRISAL, 10_000))


def _provoke(store, _context):
    ogcd_lock(store)


TANK_ACTIONS = [
    CombatActionOptions(
        action_id=ActionID.RAMPART,
        execute=_buff_ability(StatusID.RAMPART, 20_000),
        enters_combat=False,
    ),
    CombatActionOptions(action_id=ActionID.PROVOKE, execute=_provoke),
    CombatActionOptions(action_id=ActionID.REPRISAL, execute=_reprisal),
    CombatActionOptions(
        action_id=ActionID.ARMS_LENGTH,
        execute=_buff_ability(StatusID.ARMS_LENGTH, 6_000),
        enters_combat=False,
    ),
]


# Role actions - Magical
CASTER_CATALOG = [
    _ability(ActionID.SWIFTCAST, "Swiftcast", 60_000, 45),
]

CASTER_ACTIONS = [
    CombatActionOptions(
        action_id=ActionID.SWIFTCAST,
        execute=_buff_ability(StatusID.SWIFTCAST, 10_000),
        enters_combat=False,
    ),
]
