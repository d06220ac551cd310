"""Static action catalog.

The catalog is the immutable table of per-action attributes (cost, cast and
recast times, cooldown group, charges, combo predecessor). It is built once at
startup; a lookup of an unknown action is a configuration error.
"""

import json
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional

from xivcombat.common import (
    ActionID,
    ActionType,
    ResourceType,
    RECAST_GROUP_NONE,
)


class MissingCatalogEntryError(LookupError):
    """Raised when an action id has no catalog row."""

    def __init__(self, action_id):
        super().__init__(f"No catalog entry for action {action_id!r}")
        self.action_id = action_id


@dataclass(frozen=True)
class CatalogEntry:
    """
    Static attributes of a single action.

    Attributes:
        action_id (ActionID): Unique identifier for this action
        name (str): Human-readable name of the action
        action_type (ActionType): Category of the action
        cost (int): Base resource cost
        cost_type (Optional[ResourceType]): Resource the cost is paid with
        cast_time (int): Base cast time in milliseconds
        recast_time (int): Base recast time in milliseconds for each charge
        cooldown_group (int): Cooldown group shared by the action family
        max_charges (int): Maximum number of charges
        combo_action (Optional[ActionID]): Action that must precede this one to combo
        preserves_combo (bool): Whether using the action keeps a pending combo
    """

    action_id: ActionID
    name: str
    action_type: ActionType
    cost: int = 0
    cost_type: Optional[ResourceType] = None
    cast_time: int = 0
    recast_time: int = 0
    cooldown_group: int = RECAST_GROUP_NONE
    max_charges: int = 1
    combo_action: Optional[ActionID] = None
    preserves_combo: bool = False

    def __post_init__(self):
        if self.max_charges < 1:
            raise ValueError(f"{self.name}: max_charges must be at least 1")
        if self.cost < 0 or self.cast_time < 0 or self.recast_time < 0:
            raise ValueError(f"{self.name}: cost and times must not be negative")

    @property
    def is_gcd(self) -> bool:
        """Check if the action category consumes the global cooldown"""
        return self.action_type in (ActionType.WEAPONSKILL, ActionType.SPELL)

    @classmethod
    def from_dict(cls, action_name: str, data: Dict) -> "CatalogEntry":
        """
        Create an entry from its dictionary representation.

        Args:
            action_name: ActionID member name of the row
            data: Dictionary of row attributes

        Returns:
            CatalogEntry: New catalog entry
        """
        action_id = getattr(ActionID, action_name, None)
        if action_id is None:
            raise MissingCatalogEntryError(action_name)

        cost_type = data.get("cost_type")
        combo_action = data.get("combo_action")
        return cls(
            action_id=action_id,
            name=data.get("name", action_name),
            action_type=ActionType[data["type"].upper()],
            cost=data.get("cost", 0),
            cost_type=ResourceType(cost_type) if cost_type else None,
            cast_time=data.get("cast_time", 0),
            recast_time=data.get("recast_time", 0),
            cooldown_group=data.get("cooldown_group", RECAST_GROUP_NONE),
            max_charges=data.get("max_charges", 1),
            combo_action=ActionID[combo_action] if combo_action else None,
            preserves_combo=data.get("preserves_combo", False),
        )


class ActionCatalog:
    """
    Lookup table of catalog entries keyed by action id.

    Attributes:
        entries (Dict[ActionID, CatalogEntry]): Registered rows
    """

    def __init__(self, entries: Iterable[CatalogEntry] = ()):
        self.entries: Dict[ActionID, CatalogEntry] = {}
        self.extend(entries)

    def register(self, entry: CatalogEntry):
        """Register a row. Registering the same id twice is a configuration error."""
        if entry.action_id in self.entries and self.entries[entry.action_id] != entry:
            raise ValueError(f"Conflicting catalog rows for {entry.action_id!r}")
        self.entries[entry.action_id] = entry

    def extend(self, entries: Iterable[CatalogEntry]):
        for entry in entries:
            self.register(entry)

    def get(self, action_id: ActionID) -> CatalogEntry:
        """
        Get the row of an action.

        Raises:
            MissingCatalogEntryError: If the action has no row
        """
        entry = self.entries.get(action_id)
        if entry is None:
            raise MissingCatalogEntryError(action_id)
        return entry

    def validate(self, action_ids: Iterable[ActionID]):
        """Fail fast if any of the given actions has no row."""
        for action_id in action_ids:
            self.get(action_id)

        for entry in self.entries.values():
            if entry.combo_action is not None:
                self.get(entry.combo_action)

    def __contains__(self, action_id) -> bool:
        return action_id in self.entries

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries.values())

    def __len__(self) -> int:
        return len(self.entries)

    def to_dict(self) -> Dict:
        """Convert the catalog to its dictionary representation."""
        rows = {}
        for entry in self.entries.values():
            rows[entry.action_id.name] = {
                "name": entry.name,
                "type": entry.action_type.name,
                "cost": entry.cost,
                "cost_type": entry.cost_type.value if entry.cost_type else None,
                "cast_time": entry.cast_time,
                "recast_time": entry.recast_time,
                "cooldown_group": entry.cooldown_group,
                "max_charges": entry.max_charges,
                "combo_action": entry.combo_action.name if entry.combo_action else None,
                "preserves_combo": entry.preserves_combo,
            }
        return {"actions": rows}

    @classmethod
    def from_dict(cls, data: Dict) -> "ActionCatalog":
        """
        Create a catalog from a dictionary representation.

        Args:
            data: Dictionary with an "actions" mapping of ActionID names to rows

        Returns:
            ActionCatalog: New catalog instance
        """
        return cls(
            CatalogEntry.from_dict(action_name, row)
            for action_name, row in data["actions"].items()
        )

    @classmethod
    def load_from_json(cls, file_path: str) -> "ActionCatalog":
        """Load a catalog from a JSON file."""
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        return cls.from_dict(data)
