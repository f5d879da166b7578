"""Session, level, task and metric records accumulated during play."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union
import math


Number = Union[int, float]

TASK_OPTIONS_PLACEHOLDER = "[]"


def stringify_value(value: object) -> str:
    """Render a metric value as the text consumers expect."""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def coerce_number(value: object) -> Optional[Number]:
    """Return ``value`` as an int or float, or ``None`` when it is not numeric.

    Numeric strings such as ``"50"`` are accepted; booleans, ``None``, NaN and
    infinities are not.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() else number
    return None


@dataclass
class Session:
    game_id: str = ""
    session_name: str = ""
    initialized: bool = False
    session_id: Optional[str] = None


@dataclass(frozen=True)
class Metric:
    key: str
    value: str

    def to_dict(self) -> Dict[str, object]:
        return {"key": self.key, "value": self.value}


@dataclass(frozen=True)
class TaskRecord:
    """A single scored choice inside a level."""

    task_id: str
    question: str
    correct_choice: object
    choice_made: object
    time_taken_ms: Number
    xp_earned: Number

    @property
    def successful(self) -> bool:
        return self.correct_choice == self.choice_made

    def to_dict(self) -> Dict[str, object]:
        return {
            "taskId": self.task_id,
            "question": self.question,
            "options": TASK_OPTIONS_PLACEHOLDER,
            "correctChoice": self.correct_choice,
            "choiceMade": self.choice_made,
            "successful": self.successful,
            "timeTaken": self.time_taken_ms,
            "xpEarned": self.xp_earned,
        }


@dataclass
class LevelRecord:
    level_id: str
    successful: bool = False
    time_taken_ms: Number = 0
    time_direction: bool = False
    xp_earned: Number = 0
    tasks: List[TaskRecord] = field(default_factory=list)

    def complete(self, successful: bool, time_taken_ms: Number, xp_earned: Number) -> None:
        self.successful = successful
        self.time_taken_ms = time_taken_ms
        self.xp_earned = xp_earned

    def to_dict(self) -> Dict[str, object]:
        return {
            "levelId": self.level_id,
            "successful": self.successful,
            "timeTaken": self.time_taken_ms,
            "timeDirection": self.time_direction,
            "xpEarned": self.xp_earned,
            "tasks": [task.to_dict() for task in self.tasks],
        }
