"""Common definitions and utilities for XIV combat rotation mechanics.

This module contains constants, enumerations, and utility functions used by
the action engine: timing constants, cooldown group ids, action categories,
resource pools, status and action identifiers, and the speed formula that
shortens recast and cast times.
"""

import json
import math
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Optional

# Global timing constants (in milliseconds)
GCD_MAX = 2500  # Base Global Cooldown (GCD) recast time
ANIMATION_LOCK = 700  # Animation lock duration after using an action
COMBO_WINDOW = 30_000  # Time a combo token stays eligible for continuation

# Cooldown group ids
RECAST_GROUP_NONE = 0  # Actions without any cooldown group
RECAST_GROUP_GCD = 58  # Shared global cooldown group
RECAST_GROUP_EXTRA_BASE = 1000  # Synthetic cooldowns attached to a single action


def format_ms(ms: int):
    """
    Format integer milliseconds to "mm:ss.000" string format,
    handling both positive and negative values.

    Args:
        ms (int): Time in milliseconds (positive or negative)

    Returns:
        str: Formatted time string "±mm:ss.000" with optional "-" sign for negative values
    """
    is_negative = ms < 0
    abs_ms = abs(ms)

    minutes = (abs_ms // 60000) % 60
    seconds = (abs_ms // 1000) % 60
    milliseconds = abs_ms % 1000

    if is_negative:
        return f"-{minutes:02d}:{seconds:02d}.{milliseconds:03d}"
    else:
        return f"+{minutes:02d}:{seconds:02d}.{milliseconds:03d}"


class ActionType(IntEnum):
    """Category of an action.

    The category decides whether an action consumes the global cooldown by
    default and which speed stat reduces its recast and cast times.

    Attributes:
        WEAPONSKILL: Physical GCD actions, reduced by skill speed
        SPELL: Magical GCD actions, reduced by spell speed
        ABILITY: Off-GCD actions
        OTHER: Items, system actions and everything else
    """

    WEAPONSKILL = 1
    SPELL = 2
    ABILITY = 3
    OTHER = 4


class ResourceType(Enum):
    """Resource pools an action can spend.

    Attributes:
        MANA: Magic points
        CARTRIDGE: Gunbreaker powder gauge
        UNKNOWN: Placeholder for costs that are not tracked by the engine
    """

    MANA = "mana"
    CARTRIDGE = "cartridge"
    UNKNOWN = "unknown"


RESOURCE_CAPS = {
    ResourceType.MANA: 10_000,
    ResourceType.CARTRIDGE: 3,
}

RESOURCE_DEFAULTS = {
    ResourceType.MANA: 10_000,
    ResourceType.CARTRIDGE: 0,
}


class JobClass(IntEnum):
    """Job ids matching FFXIV's official ClassJob enumeration."""

    ADVENTURER = 0
    GLADIATOR = 1
    MARAUDER = 3
    PALADIN = 19
    WARRIOR = 21
    DARK_KNIGHT = 32
    GUNBREAKER = 37


class StatusID(IntEnum):
    """Status effect IDs from FFXIV.

    Contains IDs for buffs and debuffs handled by the shipped job kits.
    These match the official game IDs.
    """

    # General
    MEDICATED = 49
    SPRINT = 50

    # Role status effects
    RAMPART = 1191
    REPRISAL = 1193
    ARMS_LENGTH = 1209
    SWIFTCAST = 167

    # Gunbreaker
    NO_MERCY = 1831
    CAMOUFLAGE = 1832
    ROYAL_GUARD = 1833
    NEBULA = 1834
    AURORA = 1835
    SUPERBOLIDE = 1836
    SONIC_BREAK = 1837
    BOW_SHOCK = 1838
    HEART_OF_LIGHT = 1839
    READY_TO_RIP = 1842
    READY_TO_TEAR = 1843
    READY_TO_GOUGE = 1844
    BRUTAL_SHELL = 1898
    HEART_OF_CORUNDUM = 2683
    CLARITY_OF_CORUNDUM = 2684
    CATHARSIS_OF_CORUNDUM = 2685
    READY_TO_BLAST = 2686


class ActionID(IntEnum):
    """Action IDs from FFXIV.

    Contains IDs for weaponskills, spells, and abilities that match
    the official game IDs.
    """

    NONE = 0  # For initialization

    # General actions
    SPRINT = 3
    POTION = 846

    # Role actions - Tank
    RAMPART = 7531
    PROVOKE = 7533
    REPRISAL = 7535
    ARMS_LENGTH = 7548

    # Role actions - Magical
    SWIFTCAST = 7561

    # Gunbreaker actions
    KEEN_EDGE = 16137
    NO_MERCY = 16138
    BRUTAL_SHELL = 16139
    CAMOUFLAGE = 16140
    DEMON_SLICE = 16141
    ROYAL_GUARD = 16142
    LIGHTNING_SHOT = 16143
    DANGER_ZONE = 16144
    SOLID_BARREL = 16145
    GNASHING_FANG = 16146
    SAVAGE_CLAW = 16147
    NEBULA = 16148
    DEMON_SLAUGHTER = 16149
    WICKED_TALON = 16150
    AURORA = 16151
    SUPERBOLIDE = 16152
    SONIC_BREAK = 16153
    ROUGH_DIVIDE = 16154
    CONTINUATION = 16155
    JUGULAR_RIP = 16156
    ABDOMEN_TEAR = 16157
    EYE_GOUGE = 16158
    BOW_SHOCK = 16159
    HEART_OF_LIGHT = 16160
    HEART_OF_STONE = 16161
    BURST_STRIKE = 16162
    FATED_CIRCLE = 16163
    BLOODFEST = 16164
    BLASTING_ZONE = 16165
    HEART_OF_CORUNDUM = 25758
    HYPERVELOCITY = 25759
    DOUBLE_DOWN = 25760
    RELEASE_ROYAL_GUARD = 32068


# Status that turns the next cast into an instant one and is consumed on use
CAST_SKIP_STATUS = StatusID.SWIFTCAST


@dataclass
class LevelModifier:
    """Class representing level-specific substat modifiers.

    Attributes:
        main_attribute: Base main attribute value at this level
        substract: Base substat value subtracted in substat formulas
        division: Level divisor used in substat formulas
    """

    main_attribute: float
    substract: float
    division: float


LEVEL_MODIFIERS = {
    70: LevelModifier(main_attribute=292.0, substract=364.0, division=900.0),
    80: LevelModifier(main_attribute=340.0, substract=380.0, division=1300.0),
    90: LevelModifier(main_attribute=390.0, substract=400.0, division=1900.0),
    100: LevelModifier(main_attribute=440.0, substract=420.0, division=2780.0),
}


def calculate_recast_time(base_ms: int, speed: float, level: int = 100) -> int:
    """Apply a speed substat to a recast or cast time.

    Args:
        base_ms: Unmodified duration in milliseconds
        speed: Skill speed or spell speed value
        level: Character level, selects the substat modifiers

    Returns:
        int: Reduced duration truncated to 10ms steps
    """
    level_mod = LEVEL_MODIFIERS[level]
    speed_mod = math.floor(130.0 * (speed - level_mod.substract) / level_mod.division)
    return (base_ms * (1000 - speed_mod) // 10000) * 10


@dataclass
class CharacterStats:
    """Class representing the stats the action engine reads.

    Attributes:
        job: JobClass enumeration value
        level: Character level
        skill_speed: Skill speed substat (reduces weaponskill recasts)
        spell_speed: Spell speed substat (reduces spell casts and recasts)
    """

    job: JobClass = JobClass.ADVENTURER
    level: int = 100
    skill_speed: Optional[float] = None
    spell_speed: Optional[float] = None

    def __post_init__(self):
        if self.level not in LEVEL_MODIFIERS:
            raise ValueError(f"Unsupported level {self.level}")

        base = LEVEL_MODIFIERS[self.level].substract
        if self.skill_speed is None:
            self.skill_speed = base
        if self.spell_speed is None:
            self.spell_speed = base

    @classmethod
    def from_dict(cls, data: Dict) -> "CharacterStats":
        """
        Create stats from a dictionary representation.

        Args:
            data: Dictionary with optional "job", "level", "skill_speed"
                  and "spell_speed" keys. "job" may be a JobClass name or id.

        Returns:
            CharacterStats: New stats instance
        """
        job = data.get("job", JobClass.ADVENTURER)
        if isinstance(job, str):
            job = JobClass[job.upper()]
        else:
            job = JobClass(job)

        return cls(
            job=job,
            level=data.get("level", 100),
            skill_speed=data.get("skill_speed"),
            spell_speed=data.get("spell_speed"),
        )

    @classmethod
    def load_from_json(cls, file_path: str) -> "CharacterStats":
        """Load stats from the "stats" section of a JSON file, or its root."""
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        return cls.from_dict(data.get("stats", data))
