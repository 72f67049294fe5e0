from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


def utc_timestamp() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(slots=True, frozen=True)
class BoundingBox:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


@dataclass(slots=True, frozen=True)
class ElementSignature:
    tag: str
    id: str
    classes: frozenset[str]
    text: str
    attributes: dict[str, str]
    bounding_box: BoundingBox
    path: str = ""


@dataclass(slots=True, frozen=True)
class Strategy:
    name: str
    selector: str
    confidence: float


@dataclass(slots=True)
class StrategyTally:
    successes: int = 0
    failures: int = 0


@dataclass(slots=True)
class SelectorRecord:
    selector: str
    successes: int = 0
    failures: int = 0
    confidence: float = 0.5
    avg_response_time_ms: float = 0.0
    strategy_tally: dict[str, StrategyTally] = field(default_factory=dict)
    last_used_at: str = ""
    context: dict[str, Any] = field(default_factory=dict)

    def normalize(self) -> None:
        total = self.successes + self.failures
        if total:
            self.confidence = self.successes / total


@dataclass(slots=True)
class HealingPattern:
    original_selector: str
    strategy: str
    healed_selectors: dict[str, int] = field(default_factory=dict)
    successes: int = 0
    confidence: float = 0.5


@dataclass(slots=True, frozen=True)
class HealingEvent:
    action: str
    original_selector: str
    strategy: str
    success: bool
    healing_time_ms: float
    healed_selector: str | None = None
    attempted: tuple[str, ...] = ()
    timestamp: str = field(default_factory=utc_timestamp)


@dataclass(slots=True, frozen=True)
class OperationRecord:
    selector: str
    success: bool
    response_time_ms: float
    strategy: str | None = None
    reason: str | None = None
    attempted: tuple[str, ...] = ()
    timestamp: str = field(default_factory=utc_timestamp)


@dataclass(slots=True)
class ResolutionResult:
    selector: str
    element: Any = None
    strategy: str | None = None
    attempted: tuple[str, ...] = ()
    response_time_ms: float = 0.0

    @property
    def found(self) -> bool:
        return self.element is not None


@dataclass(slots=True)
class ActionResult:
    action: str
    target: str
    selector: str
    strategy: str
    healed: bool
    element: Any = None


@dataclass(slots=True)
class FormFillResult:
    fields: dict[str, ActionResult] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class LearningAnalytics:
    session_duration_ms: float
    operations: int
    improvements: int
    learned_selectors: int
    strategies: int
    patterns: int


class FieldKind(str, Enum):
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    TEXT = "text"
