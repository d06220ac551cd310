"""Tests for constants, the speed formula and character stats."""

import json

import pytest

from xivcombat.common import (
    LEVEL_MODIFIERS,
    CharacterStats,
    JobClass,
    calculate_recast_time,
    format_ms,
)


class TestFormatMs:
    def test_positive(self):
        assert format_ms(0) == "+00:00.000"
        assert format_ms(61_250) == "+01:01.250"

    def test_negative(self):
        assert format_ms(-1500) == "-00:01.500"


class TestRecastTime:
    @pytest.mark.parametrize("level", sorted(LEVEL_MODIFIERS))
    def test_base_speed_leaves_duration_untouched(self, level):
        base = LEVEL_MODIFIERS[level].substract
        assert calculate_recast_time(2500, base, level) == 2500
        assert calculate_recast_time(60_000, base, level) == 60_000

    def test_speed_reduces_recast(self):
        # speed_mod = floor(130 * 1000 / 2780) = 46
        assert calculate_recast_time(2500, 1420, 100) == 2380

    def test_result_is_truncated_to_ten_ms(self):
        assert calculate_recast_time(2500, 1000, 100) % 10 == 0


class TestCharacterStats:
    def test_defaults_to_level_base(self):
        stats = CharacterStats()
        assert stats.skill_speed == LEVEL_MODIFIERS[100].substract
        assert stats.spell_speed == LEVEL_MODIFIERS[100].substract

    def test_unsupported_level(self):
        with pytest.raises(ValueError):
            CharacterStats(level=42)

    def test_from_dict_accepts_job_name_or_id(self):
        assert CharacterStats.from_dict({"job": "gunbreaker"}).job == JobClass.GUNBREAKER
        assert CharacterStats.from_dict({"job": 37, "level": 90}).level == 90

    def test_load_from_json_stats_section(self, tmp_path):
        path = tmp_path / "stats.json"
        path.write_text(json.dumps({"stats": {"job": "GUNBREAKER", "skill_speed": 1000}}))

        stats = CharacterStats.load_from_json(str(path))

        assert stats.job == JobClass.GUNBREAKER
        assert stats.skill_speed == 1000
        assert stats.spell_speed == LEVEL_MODIFIERS[100].substract
