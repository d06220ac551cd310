"""
Gunbreaker Job Module
=====================

Gunbreaker catalog rows, action definitions and follow-up rules:
- Keen Edge / Brutal Shell / Solid Barrel and Demon Slice / Demon Slaughter
  combos that load the cartridge gauge
- Burst Strike, Fated Circle, Gnashing Fang and Double Down spending cartridges
- The Gnashing Fang chain and the Continuation button that morphs into
  Jugular Rip, Abdomen Tear, Eye Gouge or Hypervelocity
- Charge-based Rough Divide and Aurora with their synthetic extra cooldowns
- Stance, mitigation and buff abilities

The Ready to Rip/Tear/Gouge/Blast buffs only last until the next weaponskill;
the follow-up rules below remove them when a different weaponskill goes off.
"""

from xivcombat.catalog import CatalogEntry
from xivcombat.common import (
    ActionID,
    ActionType,
    RECAST_GROUP_EXTRA_BASE,
    RECAST_GROUP_GCD,
    ResourceType,
    StatusID,
)
from xivcombat.core import (
    CombatActionOptions,
    ExtraCooldown,
    ogcd_lock,
    start_global_cooldown,
)
from xivcombat.events import BuffApplied, BuffRemoved, ComboSet, DebuffApplied, ResourceSet
from xivcombat.followup import lapse_unless_followed_by
from xivcombat.state import CombatStore

WS = ActionType.WEAPONSKILL
AB = ActionType.ABILITY
CARTRIDGE = ResourceType.CARTRIDGE

ROUGH_DIVIDE_EXTRA_GROUP = RECAST_GROUP_EXTRA_BASE
AURORA_EXTRA_GROUP = RECAST_GROUP_EXTRA_BASE + 1


def _gcd(action_id, name, **kwargs):
    kwargs.setdefault("recast_time", 2500)
    kwargs.setdefault("cooldown_group", RECAST_GROUP_GCD)
    return CatalogEntry(action_id, name, WS, **kwargs)


def _ogcd(action_id, name, recast_time, cooldown_group, **kwargs):
    # off-GCD abilities never break a pending combo
    return CatalogEntry(
        action_id, name, AB, recast_time=recast_time, cooldown_group=cooldown_group,
        preserves_combo=True, **kwargs
    )


CATALOG = [
    # Combos
    _gcd(ActionID.KEEN_EDGE, "Keen Edge"),
    _gcd(ActionID.BRUTAL_SHELL, "Brutal Shell", combo_action=ActionID.KEEN_EDGE),
    _gcd(ActionID.SOLID_BARREL, "Solid Barrel", combo_action=ActionID.BRUTAL_SHELL),
    _gcd(ActionID.DEMON_SLICE, "Demon Slice"),
    _gcd(ActionID.DEMON_SLAUGHTER, "Demon Slaughter", combo_action=ActionID.DEMON_SLICE),
    _gcd(ActionID.LIGHTNING_SHOT, "Lightning Shot"),

    # Cartridge spenders
    _gcd(ActionID.BURST_STRIKE, "Burst Strike", cost=1, cost_type=CARTRIDGE),
    _gcd(ActionID.FATED_CIRCLE, "Fated Circle", cost=1, cost_type=CARTRIDGE),
    _gcd(ActionID.GNASHING_FANG, "Gnashing Fang", cost=1, cost_type=CARTRIDGE, recast_time=30_000,
         cooldown_group=5),
    _gcd(ActionID.SAVAGE_CLAW, "Savage Claw", combo_action=ActionID.GNASHING_FANG),
    _gcd(ActionID.WICKED_TALON, "Wicked Talon", combo_action=ActionID.SAVAGE_CLAW),
    _gcd(ActionID.DOUBLE_DOWN, "Double Down", cost=2, cost_type=CARTRIDGE, recast_time=60_000, cooldown_group=8),
    _gcd(ActionID.SONIC_BREAK, "Sonic Break", recast_time=60_000, cooldown_group=13),

    # Continuation
    _ogcd(ActionID.CONTINUATION, "Continuation", 1000, 4),
    _ogcd(ActionID.HYPERVELOCITY, "Hypervelocity", 1000, 4),
    _ogcd(ActionID.JUGULAR_RIP, "Jugular Rip", 1000, 4),
    _ogcd(ActionID.ABDOMEN_TEAR, "Abdomen Tear", 1000, 4),
    _ogcd(ActionID.EYE_GOUGE, "Eye Gouge", 1000, 4),

    # Abilities
    _ogcd(ActionID.NO_MERCY, "No Mercy", 60_000, 10),
    _ogcd(ActionID.BLOODFEST, "Bloodfest", 120_000, 14),
    _ogcd(ActionID.ROYAL_GUARD, "Royal Guard", 2000, 1),
    _ogcd(ActionID.RELEASE_ROYAL_GUARD, "Release Royal Guard", 1000, 2),
    _ogcd(ActionID.DANGER_ZONE, "Danger Zone", 30_000, 12),
    _ogcd(ActionID.BLASTING_ZONE, "Blasting Zone", 30_000, 12),
    _ogcd(ActionID.ROUGH_DIVIDE, "Rough Divide", 30_000, 9, max_charges=2),
    _ogcd(ActionID.BOW_SHOCK, "Bow Shock", 60_000, 11),

    # Mitigation
    _ogcd(ActionID.CAMOUFLAGE, "Camouflage", 90_000, 15),
    _ogcd(ActionID.NEBULA, "Nebula", 120_000, 21),
    _ogcd(ActionID.AURORA, "Aurora", 60_000, 19, max_charges=2),
    _ogcd(ActionID.SUPERBOLIDE, "Superbolide", 360_000, 24),
    _ogcd(ActionID.HEART_OF_LIGHT, "Heart of Light", 90_000, 22),
    _ogcd(ActionID.HEART_OF_STONE, "Heart of Stone", 25_000, 3),
    _ogcd(ActionID.HEART_OF_CORUNDUM, "Heart of Corundum", 25_000, 3),
]


def cartridge(store: CombatStore) -> int:
    return store.resource(CARTRIDGE)


def add_cartridge(store: CombatStore, amount: int):
    """Load cartridges; the store clamps the gauge to its cap."""
    store.dispatch(ResourceSet(CARTRIDGE, cartridge(store) + amount))


def _lock_with_buff(status_id: StatusID, duration):
    def execute(store, _context):
        ogcd_lock(store)
        store.dispatch(BuffApplied(status_id, duration))

    return execute


def _continuation_hit(status_id: StatusID):
    def execute(store, _context):
        ogcd_lock(store)
        store.dispatch(BuffRemoved(status_id))

    return execute


def _lock_only(store, _context):
    ogcd_lock(store)


# Combos

def _keen_edge(store, _context):
    store.dispatch(ComboSet(ActionID.KEEN_EDGE))


def _brutal_shell(store, context):
    if context.comboed:
        store.dispatch(ComboSet(ActionID.BRUTAL_SHELL))
        store.dispatch(BuffApplied(StatusID.BRUTAL_SHELL, 30_000))


def _solid_barrel(store, context):
    if context.comboed:
        add_cartridge(store, 1)


def _demon_slice(store, _context):
    store.dispatch(ComboSet(ActionID.DEMON_SLICE))


def _demon_slaughter(store, context):
    if context.comboed:
        add_cartridge(store, 1)


# Cartridge spenders

def _burst_strike(store, _context):
    store.dispatch(BuffApplied(StatusID.READY_TO_BLAST, 10_000))


def _gnashing_fang(store, _context):
    store.dispatch(ComboSet(ActionID.GNASHING_FANG))
    store.dispatch(BuffApplied(StatusID.READY_TO_RIP, 10_000))
    start_global_cooldown(store, reduced_by_skill_speed=True)


def _gnashing_fang_redirect(store):
    if store.has_combo(ActionID.GNASHING_FANG):
        return ActionID.SAVAGE_CLAW
    if store.has_combo(ActionID.SAVAGE_CLAW):
        return ActionID.WICKED_TALON
    return ActionID.GNASHING_FANG


def _savage_claw(store, context):
    if context.comboed:
        store.dispatch(ComboSet(ActionID.SAVAGE_CLAW))
        store.dispatch(BuffApplied(StatusID.READY_TO_TEAR, 10_000))


def _wicked_talon(store, context):
    if context.comboed:
        store.dispatch(BuffApplied(StatusID.READY_TO_GOUGE, 10_000))


def _double_down(store, _context):
    start_global_cooldown(store, reduced_by_skill_speed=True)


def _sonic_break(store, _context):
    start_global_cooldown(store, reduced_by_skill_speed=True)
    store.dispatch(DebuffApplied(StatusID.SONIC_BREAK, 30_000))


def _continuation_redirect(store):
    if store.has_buff(StatusID.READY_TO_BLAST):
        return ActionID.HYPERVELOCITY
    if store.has_buff(StatusID.READY_TO_RIP):
        return ActionID.JUGULAR_RIP
    if store.has_buff(StatusID.READY_TO_TEAR):
        return ActionID.ABDOMEN_TEAR
    if store.has_buff(StatusID.READY_TO_GOUGE):
        return ActionID.EYE_GOUGE
    return ActionID.CONTINUATION


# Abilities

def _bloodfest(store, _context):
    ogcd_lock(store)
    add_cartridge(store, 3)


def _release_royal_guard(store, _context):
    ogcd_lock(store)
    store.dispatch(BuffRemoved(StatusID.ROYAL_GUARD))


def _bow_shock(store, _context):
    ogcd_lock(store)
    store.dispatch(DebuffApplied(StatusID.BOW_SHOCK, 15_000))


def _heart_of_corundum(store, _context):
    ogcd_lock(store)
    store.dispatch(BuffApplied(StatusID.HEART_OF_CORUNDUM, 8_000))
    store.dispatch(BuffApplied(StatusID.CLARITY_OF_CORUNDUM, 4_000))
    store.dispatch(BuffApplied(StatusID.CATHARSIS_OF_CORUNDUM, 20_000))


def _has_cartridge(store):
    return cartridge(store) > 0


def _glow(_store):
    return True


ACTIONS = [
    CombatActionOptions(
        action_id=ActionID.KEEN_EDGE,
        execute=_keen_edge,
        reduced_by_skill_speed=True,
    ),
    CombatActionOptions(
        action_id=ActionID.BRUTAL_SHELL,
        execute=_brutal_shell,
        is_glowing=lambda store: store.has_combo(ActionID.KEEN_EDGE),
        reduced_by_skill_speed=True,
    ),
    CombatActionOptions(
        action_id=ActionID.SOLID_BARREL,
        execute=_solid_barrel,
        is_glowing=lambda store: store.has_combo(ActionID.BRUTAL_SHELL),
        reduced_by_skill_speed=True,
    ),
    CombatActionOptions(
        action_id=ActionID.NO_MERCY,
        execute=_lock_with_buff(StatusID.NO_MERCY, 20_000),
        enters_combat=False,
    ),
    CombatActionOptions(
        action_id=ActionID.ROYAL_GUARD,
        execute=_lock_with_buff(StatusID.ROYAL_GUARD, None),
        enters_combat=False,
        redirect=lambda store: (
            ActionID.RELEASE_ROYAL_GUARD if store.has_buff(StatusID.ROYAL_GUARD) else ActionID.ROYAL_GUARD
        ),
    ),
    CombatActionOptions(
        action_id=ActionID.RELEASE_ROYAL_GUARD,
        execute=_release_royal_guard,
        enters_combat=False,
    ),
    CombatActionOptions(
        action_id=ActionID.BURST_STRIKE,
        execute=_burst_strike,
        reduced_by_skill_speed=True,
        is_glowing=_has_cartridge,
    ),
    CombatActionOptions(
        action_id=ActionID.BLOODFEST,
        execute=_bloodfest,
        is_usable=lambda store: store.in_combat,
    ),
    CombatActionOptions(
        action_id=ActionID.CONTINUATION,
        is_usable=lambda _store: False,
        redirect=_continuation_redirect,
    ),
    CombatActionOptions(
        action_id=ActionID.HYPERVELOCITY,
        execute=_continuation_hit(StatusID.READY_TO_BLAST),
        is_glowing=_glow,
    ),
    CombatActionOptions(
        action_id=ActionID.JUGULAR_RIP,
        execute=_continuation_hit(StatusID.READY_TO_RIP),
        is_glowing=_glow,
    ),
    CombatActionOptions(
        action_id=ActionID.ABDOMEN_TEAR,
        execute=_continuation_hit(StatusID.READY_TO_TEAR),
        is_glowing=_glow,
    ),
    CombatActionOptions(
        action_id=ActionID.EYE_GOUGE,
        execute=_continuation_hit(StatusID.READY_TO_GOUGE),
        is_glowing=_glow,
    ),
    CombatActionOptions(
        action_id=ActionID.GNASHING_FANG,
        execute=_gnashing_fang,
        is_glowing=_has_cartridge,
        redirect=_gnashing_fang_redirect,
        reduced_by_skill_speed=True,
    ),
    CombatActionOptions(
        action_id=ActionID.SAVAGE_CLAW,
        execute=_savage_claw,
        is_glowing=_glow,
        reduced_by_skill_speed=True,
    ),
    CombatActionOptions(
        action_id=ActionID.WICKED_TALON,
        execute=_wicked_talon,
        is_glowing=_glow,
        reduced_by_skill_speed=True,
    ),
    CombatActionOptions(
        action_id=ActionID.DOUBLE_DOWN,
        execute=_double_down,
        is_glowing=lambda store: cartridge(store) >= 2,
        reduced_by_skill_speed=True,
    ),
    CombatActionOptions(
        action_id=ActionID.LIGHTNING_SHOT,
        reduced_by_skill_speed=True,
    ),
    CombatActionOptions(
        action_id=ActionID.DANGER_ZONE,
        redirect=lambda _store: ActionID.BLASTING_ZONE,
        is_glowing=_glow,
    ),
    CombatActionOptions(
        action_id=ActionID.BLASTING_ZONE,
        execute=_lock_only,
    ),
    CombatActionOptions(
        action_id=ActionID.ROUGH_DIVIDE,
        execute=_lock_only,
        max_charges=lambda _store: 2,
        extra_cooldown=lambda _store: ExtraCooldown(ROUGH_DIVIDE_EXTRA_GROUP, 1000),
    ),
    CombatActionOptions(
        action_id=ActionID.BOW_SHOCK,
        execute=_bow_shock,
    ),
    CombatActionOptions(
        action_id=ActionID.SONIC_BREAK,
        execute=_sonic_break,
        reduced_by_skill_speed=True,
    ),
    CombatActionOptions(
        action_id=ActionID.CAMOUFLAGE,
        execute=_lock_with_buff(StatusID.CAMOUFLAGE, 20_000),
        enters_combat=False,
    ),
    CombatActionOptions(
        action_id=ActionID.AURORA,
        execute=_lock_with_buff(StatusID.AURORA, 18_000),
        max_charges=lambda _store: 2,
        extra_cooldown=lambda _store: ExtraCooldown(AURORA_EXTRA_GROUP, 1000),
        enters_combat=False,
    ),
    CombatActionOptions(
        action_id=ActionID.NEBULA,
        execute=_lock_with_buff(StatusID.NEBULA, 15_000),
        enters_combat=False,
    ),
    CombatActionOptions(
        action_id=ActionID.SUPERBOLIDE,
        execute=_lock_with_buff(StatusID.SUPERBOLIDE, 10_000),
        enters_combat=False,
    ),
    CombatActionOptions(
        action_id=ActionID.HEART_OF_LIGHT,
        execute=_lock_with_buff(StatusID.HEART_OF_LIGHT, 15_000),
        enters_combat=False,
    ),
    CombatActionOptions(
        action_id=ActionID.HEART_OF_STONE,
        redirect=lambda _store: ActionID.HEART_OF_CORUNDUM,
    ),
    CombatActionOptions(
        action_id=ActionID.HEART_OF_CORUNDUM,
        execute=_heart_of_corundum,
        enters_combat=False,
    ),
    CombatActionOptions(
        action_id=ActionID.DEMON_SLICE,
        execute=_demon_slice,
        reduced_by_skill_speed=True,
    ),
    CombatActionOptions(
        action_id=ActionID.DEMON_SLAUGHTER,
        execute=_demon_slaughter,
        is_glowing=lambda store: store.has_combo(ActionID.DEMON_SLICE),
        reduced_by_skill_speed=True,
    ),
    CombatActionOptions(
        action_id=ActionID.FATED_CIRCLE,
        reduced_by_skill_speed=True,
        is_glowing=_has_cartridge,
    ),
]

FOLLOW_UP_RULES = [
    lapse_unless_followed_by(StatusID.READY_TO_RIP, ActionID.GNASHING_FANG),
    lapse_unless_followed_by(StatusID.READY_TO_TEAR, ActionID.SAVAGE_CLAW),
    lapse_unless_followed_by(StatusID.READY_TO_GOUGE, ActionID.WICKED_TALON),
    lapse_unless_followed_by(StatusID.READY_TO_BLAST, ActionID.BURST_STRIKE),
]
