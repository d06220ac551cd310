"""Tests for rotation files and the rotation runner."""

import json

import pytest

from convert_rotation import convert_to_rotation_json
from xivcombat.common import ActionID, ResourceType, StatusID
from xivcombat.rotation import Rotation, RotationRunner


class TestRotation:
    def test_save_and_load(self, tmp_path):
        rotation = Rotation("Opener")
        rotation.add_action(ActionID.KEEN_EDGE, time=0)
        rotation.add_action(ActionID.NO_MERCY)

        path = tmp_path / "opener.json"
        rotation.save_to_file(str(path))
        loaded = Rotation.load_from_json(str(path))

        assert loaded.name == "Opener"
        assert [(a.action_id, a.time) for a in loaded.actions] == [
            (ActionID.KEEN_EDGE, 0),
            (ActionID.NO_MERCY, None),
        ]
        assert json.loads(path.read_text())["actions"][0] == {"KEEN_EDGE": {"id": 16137, "time": 0}}

    def test_from_dict_unknown_action(self):
        with pytest.raises(ValueError):
            Rotation.from_dict({"name": "bad", "actions": [{"NOT_AN_ACTION": {"time": None}}]})

    def test_from_log_text(self):
        text = "16137|0\n\n16138|\n16139\n"

        rotation = Rotation.from_log_text(text, name="log")

        assert [(a.action_id, a.time) for a in rotation.actions] == [
            (ActionID.KEEN_EDGE, 0),
            (ActionID.NO_MERCY, None),
            (ActionID.BRUTAL_SHELL, None),
        ]

    def test_from_log_text_malformed(self):
        with pytest.raises(ValueError):
            Rotation.from_log_text("keen edge|0")


class TestRotationRunner:
    def test_untimed_steps_wait_until_ready(self, gnb):
        rotation = Rotation("combo")
        for action_id in (ActionID.KEEN_EDGE, ActionID.NO_MERCY, ActionID.BRUTAL_SHELL, ActionID.SOLID_BARREL):
            rotation.add_action(action_id)

        timeline = RotationRunner(gnb, rotation).run()

        assert [(entry.time, entry.executed) for entry in timeline] == [
            (0, True),
            (700, True),
            (2500, True),
            (5000, True),
        ]
        assert gnb.store.resource(ResourceType.CARTRIDGE) == 1

    def test_timed_step_waits_for_its_time(self, gnb):
        rotation = Rotation("late")
        rotation.add_action(ActionID.NO_MERCY, time=4000)

        timeline = RotationRunner(gnb, rotation).run()

        assert timeline[0].time == 4000
        assert gnb.store.buff_remaining(StatusID.NO_MERCY) == 20_000

    def test_unusable_step_is_skipped(self, gnb):
        rotation = Rotation("skip")
        rotation.add_action(ActionID.BLOODFEST)
        rotation.add_action(ActionID.KEEN_EDGE)

        timeline = RotationRunner(gnb, rotation).run()

        assert [entry.executed for entry in timeline] == [False, True]

    def test_action_outside_the_kit_is_skipped(self, gnb):
        rotation = Rotation("caster")
        rotation.add_action(ActionID.KEEN_EDGE)
        rotation.add_action(ActionID.SWIFTCAST)

        timeline = RotationRunner(gnb, rotation).run()

        assert [(entry.resolved_id, entry.executed) for entry in timeline] == [
            (ActionID.KEEN_EDGE, True),
            (ActionID.SWIFTCAST, False),
        ]
        assert "(skipped)" in str(timeline[1])

    def test_redirected_step_records_resolved_action(self, gnb):
        rotation = Rotation("zone")
        rotation.add_action(ActionID.DANGER_ZONE)

        timeline = RotationRunner(gnb, rotation).run()

        assert timeline[0].action_id == ActionID.DANGER_ZONE
        assert timeline[0].resolved_id == ActionID.BLASTING_ZONE
        assert "DANGER_ZONE -> BLASTING_ZONE" in str(timeline[0])

    def test_time_limit(self, gnb):
        rotation = Rotation("limit")
        for _ in range(4):
            rotation.add_action(ActionID.KEEN_EDGE)

        timeline = RotationRunner(gnb, rotation).run(time_limit=6000)

        assert [entry.time for entry in timeline] == [0, 2500, 5000]
        assert gnb.current_time == 6000


def test_convert_log_to_rotation_json(tmp_path):
    log = tmp_path / "gnb_opener.txt"
    log.write_text("16137|0\n16138|700\n")

    output_file = convert_to_rotation_json(str(log), output_dir=str(tmp_path / "out"))

    rotation = Rotation.load_from_json(output_file)
    assert rotation.name == "gnb_opener"
    assert [a.time for a in rotation.actions] == [0, 700]
