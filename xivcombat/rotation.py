"""
Scripted rotations.

A ``Rotation`` is an ordered list of button presses, optionally pinned to a
time. ``RotationRunner`` plays one back on a ``CombatSession`` and records
what actually happened at each step.
"""

import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from xivcombat.common import ActionID, format_ms

logger = logging.getLogger(__name__)


class RotationAction:
    """
    A single step of a rotation.

    Attributes:
        action_id (ActionID): Button to press
        time (Optional[int]): Earliest time in milliseconds the button is pressed at.
            If None, the button is pressed as soon as it can be used.
    """

    def __init__(self, action_id: ActionID, time: Optional[int] = None):
        self.action_id = action_id
        self.time = time

    def __repr__(self):
        return f"RotationAction({self.action_id.name}, time={self.time})"


class Rotation:
    """
    Represents a predefined sequence of button presses.

    Attributes:
        name (str): Name of the rotation
        actions (List[RotationAction]): Ordered steps
    """

    def __init__(self, name: str):
        self.name = name
        self.actions: List[RotationAction] = []

    def __len__(self):
        return len(self.actions)

    def add_action(self, action_id: ActionID, time: Optional[int] = None):
        """
        Add an action to the rotation sequence.

        Args:
            action_id: The action to execute
            time: Optional time at which to execute the action
        """
        self.actions.append(RotationAction(action_id=action_id, time=time))

    def to_dict(self) -> Dict:
        """
        Convert rotation to dictionary representation for serialization.

        Returns:
            Dict: Dictionary representation of the rotation
        """
        return {
            "name": self.name,
            "actions": [
                {str(a.action_id.name): {"id": a.action_id.value, "time": a.time}}
                for a in self.actions
            ],
        }

    def save_to_file(self, file_path: str):
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: Dict) -> "Rotation":
        """
        Create a rotation from a dictionary representation.

        Steps are keyed by ActionID name; the ``id`` field is used when the
        name is not a known action.

        Raises:
            ValueError: If a step names an unknown action
        """
        rotation = cls(name=data.get("name", "Rotation"))

        for action_entry in data["actions"]:
            for action_name, action_details in action_entry.items():
                action_id = getattr(ActionID, action_name, None)
                if action_id is None and action_details.get("id") is not None:
                    action_id = ActionID(int(action_details["id"]))
                if action_id is None:
                    raise ValueError(f"Unknown action in rotation: {action_name}")
                rotation.add_action(action_id=action_id, time=action_details.get("time"))

        return rotation

    @classmethod
    def load_from_json(cls, file_path: str) -> "Rotation":
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        return cls.from_dict(data)

    @classmethod
    def from_log_text(cls, text: str, name: str = "Rotation") -> "Rotation":
        """
        Parse a rotation from an action log.

        Each non-empty line is either ``<action id>|<time ms>`` or a bare
        ``<action id>``; an empty time field leaves the step untimed.

        Raises:
            ValueError: If a line is malformed or names an unknown action id
        """
        rotation = cls(name=name)

        for line_no, line in enumerate(text.strip().splitlines(), start=1):
            line = line.strip()
            if not line:
                continue

            parts = line.split("|")
            if len(parts) > 2 or not parts[0].strip().isdigit():
                raise ValueError(f"Malformed rotation line {line_no}: {line!r}")

            action_id = ActionID(int(parts[0]))
            time = None
            if len(parts) == 2 and parts[1].strip():
                time = int(parts[1])

            rotation.add_action(action_id=action_id, time=time)

        return rotation


@dataclass(frozen=True)
class TimelineEntry:
    """
    Outcome of one rotation step.

    Attributes:
        time: Time the button was pressed at
        action_id: Button pressed
        resolved_id: Action the button stood for at that time
        executed: Whether the action was executed
    """

    time: int
    action_id: ActionID
    resolved_id: ActionID
    executed: bool

    def __str__(self):
        status = "" if self.executed else " (skipped)"
        name = self.resolved_id.name
        if self.resolved_id != self.action_id:
            name = f"{self.action_id.name} -> {name}"
        return f"{format_ms(self.time)} {name}{status}"


class RotationRunner:
    """
    Plays a rotation back on a session.

    Attributes:
        session (CombatSession): Session the buttons are pressed on
        rotation (Rotation): Steps to play
    """

    def __init__(self, session, rotation: Rotation):
        self.session = session
        self.rotation = rotation

    def run(self, time_limit: Optional[int] = None) -> List[TimelineEntry]:
        """
        Press every button of the rotation in order.

        Each step waits until its pinned time, if any, and until the button
        could be used. A step that still cannot be used at that point is
        recorded as skipped, as is a step whose action is not in the session
        kit. With a time limit, steps that would be pressed after it are
        dropped and the clock is advanced to the limit.

        Returns:
            List[TimelineEntry]: One entry per step that was pressed
        """
        session = self.session
        timeline: List[TimelineEntry] = []

        for step in self.rotation.actions:
            if step.action_id not in session.actions:
                logger.info("%s is not in the kit, skipped", step.action_id.name)
                timeline.append(
                    TimelineEntry(session.current_time, step.action_id, step.action_id, False)
                )
                continue

            resolved = session.resolve(step.action_id)
            if resolved not in session.actions:
                logger.info(
                    "%s redirects to %s which is not in the kit, skipped",
                    step.action_id.name, resolved.name,
                )
                timeline.append(TimelineEntry(session.current_time, step.action_id, resolved, False))
                continue

            press_at = session.next_ready_time(step.action_id)
            if step.time is not None:
                press_at = max(press_at, step.time)

            if time_limit is not None and press_at > time_limit:
                logger.debug("%s falls after the time limit, stopping", step.action_id.name)
                break

            session.advance_to(press_at)
            resolved = session.resolve(step.action_id)
            executed = session.use_action(step.action_id)
            if not executed:
                logger.info(
                    "%s skipped at %s", step.action_id.name, format_ms(session.current_time)
                )

            timeline.append(TimelineEntry(session.current_time, step.action_id, resolved, executed))

        if time_limit is not None and session.current_time < time_limit:
            session.advance_to(time_limit)

        return timeline
