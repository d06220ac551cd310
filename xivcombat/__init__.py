from xivcombat.catalog import ActionCatalog, CatalogEntry, MissingCatalogEntryError
from xivcombat.common import (
    ActionID,
    ActionType,
    CharacterStats,
    JobClass,
    ResourceType,
    StatusID,
    format_ms,
)
from xivcombat.core import CombatAction, CombatActionOptions, ExecuteContext, ExtraCooldown
from xivcombat.followup import FollowUpLayer, FollowUpRule
from xivcombat.rotation import Rotation, RotationAction, RotationRunner, TimelineEntry
from xivcombat.session import CombatSession, create_session
from xivcombat.state import CombatState, CombatStore
from xivcombat.task import Scheduler, Task

__all__ = [
    "ActionCatalog",
    "ActionID",
    "ActionType",
    "CatalogEntry",
    "CharacterStats",
    "CombatAction",
    "CombatActionOptions",
    "CombatSession",
    "CombatState",
    "CombatStore",
    "ExecuteContext",
    "ExtraCooldown",
    "FollowUpLayer",
    "FollowUpRule",
    "JobClass",
    "MissingCatalogEntryError",
    "ResourceType",
    "Rotation",
    "RotationAction",
    "RotationRunner",
    "Scheduler",
    "StatusID",
    "Task",
    "TimelineEntry",
    "create_session",
    "format_ms",
]
