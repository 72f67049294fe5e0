from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Sequence

from selenium.common.exceptions import (
    ElementClickInterceptedException,
    ElementNotInteractableException,
    StaleElementReferenceException,
    WebDriverException,
)

from selfheal.config.schema import HealingConfig
from selfheal.core.exceptions import ElementNotInteractable, HealingFailure, InvalidStrategySelector
from selfheal.core.learning import LearningStore
from selfheal.core.metadata import ActionResult, HealingEvent, Strategy
from selfheal.core.resolver import DIRECT_STRATEGY, monotonic_ms, query_elements
from selfheal.core.strategies import FallbackStrategyGenerator
from selfheal.utils.interactability import is_interactable
from selfheal.utils.wait import wait_until

log = logging.getLogger(__name__)

NO_STRATEGY = "none"
RETRYABLE_ERRORS = (
    ElementClickInterceptedException,
    ElementNotInteractableException,
    StaleElementReferenceException,
)


class Healer:
    """Runs the direct, learned, then fallback search behind every healing action.

    Each call to :meth:`heal` or :meth:`fail` emits exactly one
    :class:`HealingEvent` and updates the learning store once.
    """

    def __init__(
        self,
        driver,
        learning_store: LearningStore,
        sink=None,
        config: HealingConfig | None = None,
        generator: FallbackStrategyGenerator | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.driver = driver
        self.learning_store = learning_store
        self.sink = sink
        self.config = config or HealingConfig()
        self.generator = generator or FallbackStrategyGenerator(self.config.test_id_attributes)
        self.clock = clock or monotonic_ms

    def heal(
        self,
        action: str,
        original: str,
        direct: Strategy | None,
        fallbacks: Iterable[Strategy],
        perform: Callable[[Any], None],
        *,
        scope=None,
        context: dict[str, Any] | None = None,
        max_attempts: int | None = None,
        ready: Callable[[Any], bool] | None = None,
        timeout: float | None = None,
    ) -> ActionResult:
        """Acts on the first candidate that matches, once it satisfies ``ready``.

        ``ready`` defaults to the interactability check and is polled for up to
        ``timeout`` seconds (``action_timeout_seconds`` when omitted).
        """

        started = self.clock()
        search_root = scope if scope is not None else self.driver
        attempts = max_attempts or self.config.max_attempts
        ready = ready or is_interactable
        limit = self.config.action_timeout_seconds if timeout is None else timeout
        attempted: list[str] = []

        for strategy, healed in self._plan(original, direct, fallbacks):
            attempted.append(strategy.name)
            element = self._first_match(search_root, strategy.selector)
            if element is None:
                log.debug("%s: %s did not match %s", action, strategy.name, strategy.selector)
                continue
            try:
                element = self._perform(
                    action, search_root, strategy.selector, element, perform, attempts, ready, limit
                )
            except ElementNotInteractable:
                self._finish_failure(action, original, strategy.name, attempted, started, context)
                raise
            elapsed = self.clock() - started
            if healed:
                log.info("Healed %s %s -> %s via %s", action, original, strategy.selector, strategy.name)
                self.learning_store.record_healing_success(
                    original, strategy.selector, strategy.name, elapsed, context
                )
            else:
                self.learning_store.record_success(original, strategy.name, elapsed, context)
            self._emit(
                HealingEvent(
                    action=action,
                    original_selector=original,
                    strategy=strategy.name,
                    success=True,
                    healing_time_ms=elapsed,
                    healed_selector=strategy.selector if healed else None,
                    attempted=tuple(attempted),
                )
            )
            return ActionResult(
                action=action,
                target=original,
                selector=strategy.selector,
                strategy=strategy.name,
                healed=healed,
                element=element,
            )

        self._finish_failure(action, original, NO_STRATEGY, attempted, started, context)
        raise HealingFailure(original, action)

    def fail(self, action: str, original: str, context: dict[str, Any] | None = None) -> HealingFailure:
        """Records a failed action that never reached the strategy search."""

        self._finish_failure(action, original, NO_STRATEGY, [], self.clock(), context)
        return HealingFailure(original, action)

    def _plan(
        self,
        original: str,
        direct: Strategy | None,
        fallbacks: Iterable[Strategy],
    ) -> list[tuple[Strategy, bool]]:
        plan: list[tuple[Strategy, bool]] = []
        if direct is not None:
            plan.append((direct, False))
        if self.config.prefer_learned_healing:
            learned = self.learning_store.preferred_healing(original)
            if learned is not None:
                healed_selector, strategy_name = learned
                plan.append((Strategy(strategy_name, healed_selector, 1.0), True))
        plan.extend((strategy, True) for strategy in fallbacks)
        seen: set[str] = set()
        unique: list[tuple[Strategy, bool]] = []
        for strategy, healed in plan:
            if strategy.selector in seen:
                continue
            seen.add(strategy.selector)
            unique.append((strategy, healed))
        return unique

    def _first_match(self, search_root, selector: str):
        try:
            matches = query_elements(search_root, selector)
        except InvalidStrategySelector as exc:
            log.debug("Skipping candidate: %s", exc)
            return None
        return matches[0] if matches else None

    def _perform(
        self,
        action: str,
        search_root,
        selector: str,
        element,
        perform,
        attempts: int,
        ready: Callable[[Any], bool],
        limit: float,
    ):
        for attempt in range(1, attempts + 1):
            target = element
            if not wait_until(lambda: ready(target), limit):
                raise ElementNotInteractable(selector, action)
            try:
                perform(target)
                return target
            except RETRYABLE_ERRORS as exc:
                log.debug("%s attempt %d/%d on %s failed: %s", action, attempt, attempts, selector, exc)
                if attempt == attempts:
                    raise ElementNotInteractable(selector, action) from exc
                element = self._first_match(search_root, selector)
                if element is None:
                    raise ElementNotInteractable(selector, action) from exc
            except WebDriverException as exc:
                raise ElementNotInteractable(selector, action) from exc
        raise ElementNotInteractable(selector, action)

    def _finish_failure(
        self,
        action: str,
        original: str,
        strategy: str,
        attempted: Sequence[str],
        started: float,
        context: dict[str, Any] | None,
    ) -> None:
        elapsed = self.clock() - started
        log.warning("Healing %s failed for %s after %s", action, original, ", ".join(attempted) or "no strategies")
        self.learning_store.record_failure(
            original,
            f"healing {action} failed",
            context,
            strategy if strategy != NO_STRATEGY else None,
        )
        self._emit(
            HealingEvent(
                action=action,
                original_selector=original,
                strategy=strategy,
                success=False,
                healing_time_ms=elapsed,
                attempted=tuple(attempted),
            )
        )

    def _emit(self, event: HealingEvent) -> None:
        if self.sink is not None:
            self.sink.emit_healing_event(event)
