from __future__ import annotations

import logging
import time
from dataclasses import asdict
from typing import Any, Callable

from selfheal.core.metadata import (
    HealingPattern,
    LearningAnalytics,
    SelectorRecord,
    StrategyTally,
    utc_timestamp,
)

log = logging.getLogger(__name__)

NEUTRAL_CONFIDENCE = 0.5
PATTERN_CONFIDENCE_STEP = 0.1
PATTERN_CONFIDENCE_CEILING = 0.95
_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def hash_selector(selector: str) -> str:
    """Deterministic 32-bit polynomial hash rendered as unsigned base 36."""

    value = 0
    for char in selector:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def element_key(selector: str, context: dict[str, Any] | None = None) -> str:
    page = (context or {}).get("page") or "unknown"
    return f"{page}_{hash_selector(selector)}"


class LearningStore:
    """Session-scoped statistics for selectors and healing patterns.

    The store is written only through the ``record_*`` methods and never
    raises for unknown keys; callers treat missing data as the neutral prior.
    """

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        self.clock = clock or (lambda: time.monotonic() * 1000.0)
        self.selectors: dict[str, SelectorRecord] = {}
        self.patterns: dict[tuple[str, str], HealingPattern] = {}
        self.strategies: dict[str, StrategyTally] = {}
        self.operations: list[dict[str, Any]] = []
        self.improvements: list[dict[str, Any]] = []
        self.started_at = self.clock()

    def reset(self) -> None:
        self.selectors.clear()
        self.patterns.clear()
        self.strategies.clear()
        self.operations.clear()
        self.improvements.clear()
        self.started_at = self.clock()

    def record_success(
        self,
        selector: str,
        strategy: str,
        response_time_ms: float,
        context: dict[str, Any] | None = None,
    ) -> SelectorRecord:
        record = self._record_for(selector, context)
        record.successes += 1
        record.last_used_at = utc_timestamp()
        # Two-point average, kept for compatibility with existing learning data.
        if record.avg_response_time_ms == 0:
            record.avg_response_time_ms = float(response_time_ms)
        else:
            record.avg_response_time_ms = (record.avg_response_time_ms + response_time_ms) / 2
        record.normalize()
        record.strategy_tally.setdefault(strategy, StrategyTally()).successes += 1
        self.strategies.setdefault(strategy, StrategyTally()).successes += 1
        self.operations.append(
            {
                "type": "success",
                "selector": selector,
                "strategy": strategy,
                "response_time_ms": response_time_ms,
                "context": dict(context or {}),
            }
        )
        return record

    def record_failure(
        self,
        selector: str,
        reason: str | None = None,
        context: dict[str, Any] | None = None,
        strategy: str | None = None,
    ) -> SelectorRecord:
        record = self._record_for(selector, context)
        record.failures += 1
        record.last_used_at = utc_timestamp()
        record.normalize()
        if strategy:
            record.strategy_tally.setdefault(strategy, StrategyTally()).failures += 1
            self.strategies.setdefault(strategy, StrategyTally()).failures += 1
        self.operations.append(
            {
                "type": "failure",
                "selector": selector,
                "strategy": strategy,
                "reason": reason,
                "context": dict(context or {}),
            }
        )
        return record

    def record_healing_success(
        self,
        original: str,
        healed: str,
        strategy: str,
        response_time_ms: float = 0.0,
        context: dict[str, Any] | None = None,
    ) -> HealingPattern:
        pattern = self.patterns.get((original, strategy))
        if pattern is None:
            pattern = HealingPattern(original_selector=original, strategy=strategy)
            self.patterns[(original, strategy)] = pattern
        pattern.successes += 1
        pattern.healed_selectors[healed] = pattern.healed_selectors.get(healed, 0) + 1
        pattern.confidence = min(PATTERN_CONFIDENCE_CEILING, pattern.confidence + PATTERN_CONFIDENCE_STEP)
        self.improvements.append(
            {
                "type": "healing-success",
                "original_selector": original,
                "healed_selector": healed,
                "strategy": strategy,
                "confidence": pattern.confidence,
            }
        )
        log.info("Learned healing %s -> %s via %s (confidence %.2f)", original, healed, strategy, pattern.confidence)
        self.record_success(healed, strategy, response_time_ms, context)
        return pattern

    def lookup(self, selector: str, context: dict[str, Any] | None = None) -> SelectorRecord | None:
        return self.selectors.get(element_key(selector, context))

    def confidence(self, selector: str, context: dict[str, Any] | None = None) -> float:
        record = self.lookup(selector, context)
        if record is None or not (record.successes + record.failures):
            return NEUTRAL_CONFIDENCE
        return record.confidence

    def pattern(self, original: str, strategy: str) -> HealingPattern | None:
        return self.patterns.get((original, strategy))

    def preferred_healing(self, original: str) -> tuple[str, str] | None:
        """Returns ``(healed_selector, strategy)`` of the most trusted pattern for ``original``."""

        candidates = [pattern for (selector, _), pattern in self.patterns.items() if selector == original]
        if not candidates:
            return None
        best = max(candidates, key=lambda item: item.confidence)
        healed = max(best.healed_selectors.items(), key=lambda item: item[1])[0]
        return healed, best.strategy

    def analytics(self) -> LearningAnalytics:
        return LearningAnalytics(
            session_duration_ms=self.clock() - self.started_at,
            operations=len(self.operations),
            improvements=len(self.improvements),
            learned_selectors=len(self.selectors),
            strategies=len(self.strategies),
            patterns=len(self.patterns),
        )

    def snapshot(self) -> dict[str, Any]:
        return {
            "selectors": {key: asdict(record) for key, record in self.selectors.items()},
            "patterns": [asdict(pattern) for pattern in self.patterns.values()],
            "analytics": asdict(self.analytics()),
        }

    def _record_for(self, selector: str, context: dict[str, Any] | None) -> SelectorRecord:
        key = element_key(selector, context)
        record = self.selectors.get(key)
        if record is None:
            record = SelectorRecord(selector=selector, confidence=NEUTRAL_CONFIDENCE, context=dict(context or {}))
            self.selectors[key] = record
        return record
