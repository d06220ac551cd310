"""Tests for action reads and the execute protocol."""

import logging

from conftest import ABILITY, CHARGED, FOLLOW, OPENER, SPELL, SWIFTCAST, make_catalog

from xivcombat.catalog import ActionCatalog
from xivcombat.common import RECAST_GROUP_GCD, ActionID, CharacterStats, ResourceType, StatusID
from xivcombat.core import CombatActionOptions
from xivcombat.events import ActionExecuted, CooldownStarted, ResourceSet
from xivcombat.job import role
from xivcombat.session import CombatSession


def executed_ids(session):
    return [event.action_id for _, event in session.store.history if isinstance(event, ActionExecuted)]


def make_session(*options, stats=None):
    return CombatSession(make_catalog(), list(options), stats=stats)


class TestReads:
    def test_defaults(self, session):
        action = session.action(FOLLOW)
        store = session.store

        assert action.redirect(store) == FOLLOW
        assert not action.is_glowing(store)
        assert action.is_usable(store)
        assert action.cost(store) == 0
        assert action.max_charges(store) == 1
        assert action.extra_cooldown(store) is None

    def test_get_cooldown_views(self, session):
        spell = session.action(SPELL)
        charged = session.action(CHARGED)

        assert spell.get_cooldown(session.store) == (None, None, None)

        session.use_action(CHARGED)
        own, gcd, extra = charged.get_cooldown(session.store)
        assert own.charges == 1
        assert gcd is None

        session.use_action(SPELL)
        own, gcd, extra = spell.get_cooldown(session.store)
        assert own is None
        assert gcd.remaining == 2500
        assert extra is None

    def test_default_cost_check(self, session):
        session.store.dispatch(ResourceSet(ResourceType.MANA, 1999))
        assert not session.action(SPELL).is_usable(session.store)

    def test_cast_time_read_has_no_side_effect(self, session):
        session.use_action(SWIFTCAST)
        spell = session.action(SPELL)

        assert spell.cast_time(session.store) == 0
        assert spell.cast_time(session.store) == 0
        assert session.store.has_buff(StatusID.SWIFTCAST)


class TestCombo:
    def test_successor_consumes_token(self, session, recorders):
        assert session.use_action(OPENER)
        session.advance_to(1000)

        assert session.use_action(FOLLOW)
        assert recorders[FOLLOW].contexts[-1].comboed
        assert session.store.combo_action is None

        assert session.use_action(FOLLOW)
        assert not recorders[FOLLOW].contexts[-1].comboed

    def test_non_preserving_action_breaks_combo(self, session, recorders):
        session.use_action(OPENER)
        session.advance_to(700)
        session.use_action(CHARGED)

        session.use_action(FOLLOW)

        assert not recorders[FOLLOW].contexts[-1].comboed

    def test_preserving_action_keeps_combo(self, session, recorders):
        session.use_action(OPENER)
        session.advance_to(700)
        session.use_action(ABILITY)

        session.use_action(FOLLOW)

        assert recorders[FOLLOW].contexts[-1].comboed

    def test_expired_token_does_not_combo(self, session, recorders):
        session.use_action(OPENER)
        session.advance_to(30_000)

        session.use_action(FOLLOW)

        assert not recorders[FOLLOW].contexts[-1].comboed


class TestCooldowns:
    def test_own_group_started(self, session):
        session.use_action(OPENER)
        assert session.store.cooldown_remaining(1) == 2500
        assert session.store.animation_lock_remaining == 700

    def test_charges_recover_one_at_a_time(self, session):
        assert session.use_action(CHARGED)
        assert session.use_action(CHARGED)
        assert not session.can_use(CHARGED)
        assert session.action(CHARGED).charges(session.store) == 0

        session.advance_to(1000)
        assert session.action(CHARGED).charges(session.store) == 1

        session.advance_to(2000)
        assert session.action(CHARGED).charges(session.store) == 2

    def test_use_with_charge_left_extends(self, session):
        session.use_action(CHARGED)
        session.advance_to(600)

        session.use_action(CHARGED)

        # 400ms left on the first charge plus a full recharge
        assert session.store.cooldown_remaining(9) == 1400

    def test_ready_in(self, session):
        session.use_action(CHARGED)
        session.use_action(CHARGED)

        assert session.action(CHARGED).ready_in(session.store) == 1000
        assert session.next_ready_time(CHARGED) == 1000

    def test_execute_without_charge_is_rejected(self, session, caplog):
        session.use_action(CHARGED)
        session.use_action(CHARGED)

        with caplog.at_level(logging.WARNING):
            assert not session.action(CHARGED).execute(session)

        assert session.store.cooldown_remaining(9) == 2000
        assert "without a charge" in caplog.text


class TestCast:
    def test_cast_resolves_after_cast_time(self, session, recorders):
        assert session.use_action(SPELL)
        assert session.store.is_casting
        assert recorders[SPELL].contexts == []

        session.advance_to(1999)
        assert recorders[SPELL].contexts == []

        session.advance_to(2000)
        assert not session.store.is_casting
        assert recorders[SPELL].contexts[0].cost == 2000
        assert session.store.resource(ResourceType.MANA) == 8000
        assert executed_ids(session) == [SPELL]

    def test_interrupted_cast_never_resolves(self, session, recorders):
        session.use_action(SPELL)
        session.advance_to(1000)

        assert session.interrupt()
        session.advance_to(5000)

        assert recorders[SPELL].contexts == []
        assert session.store.resource(ResourceType.MANA) == 10_000
        assert executed_ids(session) == []
        assert not session.store.in_combat
        assert not session.interrupt()

    def test_second_cast_is_rejected(self, session, caplog):
        session.use_action(SPELL)
        history_len = len(session.store.history)

        with caplog.at_level(logging.WARNING):
            assert not session.action(SPELL).execute(session)

        assert len(session.store.history) == history_len
        assert "while casting" in caplog.text

    def test_cast_skip_resolves_instantly(self, session, recorders):
        session.use_action(SWIFTCAST)

        assert session.use_action(SPELL)

        assert not session.store.is_casting
        assert not session.store.has_buff(StatusID.SWIFTCAST)
        assert recorders[SPELL].contexts[0].cost == 2000
        assert executed_ids(session) == [SWIFTCAST, SPELL]

    def test_role_swiftcast_skips_next_cast(self):
        catalog = ActionCatalog(role.CASTER_CATALOG + [make_catalog().get(SPELL)])
        session = CombatSession(catalog, role.CASTER_ACTIONS + [CombatActionOptions(action_id=SPELL)])

        assert session.use_action(ActionID.SWIFTCAST)
        assert not session.store.in_combat
        assert session.store.cooldown_remaining(45) == 60_000

        session.advance_to(700)
        assert session.use_action(SPELL)

        assert not session.store.is_casting
        assert not session.store.has_buff(StatusID.SWIFTCAST)
        assert session.store.resource(ResourceType.MANA) == 8000

    def test_cost_is_evaluated_at_resolution(self, session, recorders, caplog):
        session.use_action(SPELL)
        session.store.dispatch(ResourceSet(ResourceType.MANA, 1000))

        with caplog.at_level(logging.WARNING):
            session.advance_to(2000)

        assert recorders[SPELL].contexts[0].cost == 0
        assert session.store.resource(ResourceType.MANA) == 1000
        assert executed_ids(session) == [SPELL]
        assert "skipping payment" in caplog.text


class TestExecute:
    def test_unusable_execute_is_noop(self, session, caplog):
        session.store.dispatch(ResourceSet(ResourceType.MANA, 0))
        history_len = len(session.store.history)

        with caplog.at_level(logging.WARNING):
            assert not session.action(SPELL).execute(session)

        assert len(session.store.history) == history_len
        assert "unusable" in caplog.text

    def test_resolution_enters_combat(self, session):
        assert not session.store.in_combat
        session.use_action(FOLLOW)
        assert session.store.in_combat

    def test_executed_is_last_event_of_resolution(self, session):
        session.use_action(OPENER)
        _, last = session.store.history[-1]
        assert last == ActionExecuted(OPENER)

    def test_resources_never_negative(self, session):
        for _ in range(10):
            session.use_action(SWIFTCAST)
            session.use_action(SPELL)
            session.advance_to(session.current_time + 60_000)
            assert session.store.resource(ResourceType.MANA) >= 0


class TestOptionFlags:
    def test_spell_speed_scales_spell_cast_and_recast(self):
        stats = CharacterStats(spell_speed=1420)
        session = make_session(
            CombatActionOptions(action_id=SPELL, reduced_by_spell_speed=True),
            CombatActionOptions(action_id=OPENER, reduced_by_spell_speed=True),
            stats=stats,
        )
        store = session.store

        assert session.action(SPELL).cast_time(store) == 1900
        assert session.action(SPELL).cooldown(store) == 2380
        assert session.action(OPENER).cooldown(store) == 2500

    def test_spell_speed_ignored_without_flag(self):
        session = make_session(CombatActionOptions(action_id=SPELL), stats=CharacterStats(spell_speed=1420))

        assert session.action(SPELL).cast_time(session.store) == 2000
        assert session.action(SPELL).cooldown(session.store) == 2500

    def test_skip_default_cost_check(self):
        session = make_session(CombatActionOptions(action_id=SPELL, skip_default_cost_check=True))
        session.store.dispatch(ResourceSet(ResourceType.MANA, 0))

        assert session.action(SPELL).is_usable(session.store)
        assert session.use_action(SPELL)

    def test_is_gcd_action_override(self):
        session = make_session(
            CombatActionOptions(action_id=FOLLOW, is_gcd_action=True),
            CombatActionOptions(action_id=SPELL, is_gcd_action=False),
        )
        session.store.dispatch(CooldownStarted(RECAST_GROUP_GCD, 2500))

        assert not session.action(FOLLOW).is_ready(session.store)
        assert session.action(SPELL).is_ready(session.store)

    def test_animation_lock_override(self):
        session = make_session(CombatActionOptions(action_id=OPENER, animation_lock=1200))

        session.use_action(OPENER)

        assert session.store.animation_lock_remaining == 1200
        assert not session.can_use(OPENER)
