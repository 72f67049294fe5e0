from __future__ import annotations

import logging
import time
from typing import Any, Callable

from selenium.common.exceptions import InvalidSelectorException
from selenium.webdriver.common.by import By

from selfheal.core.exceptions import InvalidStrategySelector, ResolutionFailure
from selfheal.core.learning import LearningStore
from selfheal.core.metadata import OperationRecord, ResolutionResult
from selfheal.core.strategies import FallbackStrategyGenerator
from selfheal.utils.dom_extract import extract_signature
from selfheal.utils.interactability import is_interactable
from selfheal.utils.scoring import score_candidates
from selfheal.utils.selectors import (
    deepest_text_xpath,
    extract_text_literal,
    has_text_predicate,
    infer_selector_type,
    text_node_xpath,
)
from selfheal.utils.wait import wait_until

log = logging.getLogger(__name__)

DIRECT_STRATEGY = "direct"
TEXT_MATCH_STRATEGY = "xpath-contains"
NOT_FOUND_REASON = "no strategy produced an interactable element"


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def query_elements(driver, selector: str) -> list:
    """Runs a CSS or XPath query; raises ``InvalidStrategySelector`` for bad syntax."""

    by = By.XPATH if infer_selector_type(selector) == "xpath" else By.CSS_SELECTOR
    try:
        return list(driver.find_elements(by, selector) or [])
    except InvalidSelectorException as exc:
        raise InvalidStrategySelector(selector) from exc


class ElementResolver:
    """Resolves a possibly stale selector to an interactable element.

    Resolution walks original selector, text predicate, then generated
    fallbacks, and stops at the first interactable match. Every call produces
    exactly one learning-store sample and one operation record.
    """

    def __init__(
        self,
        driver,
        learning_store: LearningStore,
        sink=None,
        generator: FallbackStrategyGenerator | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.driver = driver
        self.learning_store = learning_store
        self.sink = sink
        self.generator = generator or FallbackStrategyGenerator()
        self.clock = clock or monotonic_ms

    def resolve(
        self,
        selector: str,
        context: dict[str, Any] | None = None,
        timeout: float = 0.0,
    ) -> ResolutionResult:
        """Runs the strategy search, repeating it for up to ``timeout`` seconds.

        The default of zero searches the current document once. Polling stops at
        the first pass that finds an element; only the final outcome is recorded.
        """

        started = self.clock()
        attempted: list[str] = []
        outcome: list[tuple[str, Any]] = []

        def search() -> bool:
            attempted.clear()
            hit = self._search(selector, attempted)
            if hit is not None:
                outcome.append(hit)
            return hit is not None

        if wait_until(search, timeout):
            strategy, element = outcome[-1]
            return self._found(selector, element, strategy, attempted, started, context)
        return self._not_found(selector, attempted, started, context)

    def find(self, selector: str, context: dict[str, Any] | None = None, timeout: float = 0.0):
        result = self.resolve(selector, context, timeout)
        if not result.found:
            raise ResolutionFailure(selector, result.attempted)
        return result.element

    def query(self, selector: str) -> list:
        try:
            return query_elements(self.driver, selector)
        except InvalidStrategySelector as exc:
            log.debug("Skipping selector: %s", exc)
            return []

    def first_match(self, selector: str):
        matches = self.query(selector)
        return matches[0] if matches else None

    def find_by_text(self, selector: str):
        """Finds an element by the literal of a ``contains("...")`` predicate.

        Elements whose own text node contains the literal win. Otherwise the
        deepest element whose string value contains it is used, rather than the
        first such element in document order, which would be ``<html>``.
        """

        text = extract_text_literal(selector)
        if not text:
            return None
        return self.first_match(text_node_xpath(text)) or self.first_match(deepest_text_xpath(text))

    def rank_matches(self, reference, selector: str) -> list[tuple[Any, float]]:
        """Orders the matches of ``selector`` by similarity to ``reference``."""

        return self.rank_elements(reference, self.query(selector))

    @staticmethod
    def rank_elements(reference, elements) -> list[tuple[Any, float]]:
        reference_signature = extract_signature(reference)
        signed = [(element, extract_signature(element)) for element in elements]
        if reference_signature is None:
            return [(element, 0.0) for element, _ in signed]
        owners = {id(signature): element for element, signature in signed if signature is not None}
        candidates = [signature for _, signature in signed if signature is not None]
        scored = score_candidates(reference_signature, candidates)
        ranked = [(owners[id(signature)], score) for signature, score in scored]
        ranked.extend((element, 0.0) for element, signature in signed if signature is None)
        return ranked

    def _search(self, selector: str, attempted: list[str]) -> tuple[str, Any] | None:
        attempted.append(DIRECT_STRATEGY)
        element = self._accept(self.first_match(selector))
        if element is not None:
            return DIRECT_STRATEGY, element

        if has_text_predicate(selector):
            attempted.append(TEXT_MATCH_STRATEGY)
            element = self._accept(self.find_by_text(selector))
            if element is not None:
                return TEXT_MATCH_STRATEGY, element

        for strategy in self.generator.generate(selector):
            attempted.append(strategy.name)
            element = self._pick_fallback(strategy.selector)
            if element is not None:
                log.info("Resolved %s through fallback %s (%s)", selector, strategy.name, strategy.selector)
                return strategy.name, element
            log.debug("Fallback %s did not match for %s", strategy.name, selector)
        return None

    def _pick_fallback(self, selector: str):
        """First usable match; when the first is unusable, the most similar usable one."""

        matches = self.query(selector)
        if not matches:
            return None
        first, rest = matches[0], matches[1:]
        if is_interactable(first):
            return first
        for element, score in self.rank_elements(first, rest):
            if is_interactable(element):
                log.debug("Fallback %s used a similar match (score %.2f)", selector, score)
                return element
        return None

    @staticmethod
    def _accept(element):
        if element is not None and is_interactable(element):
            return element
        return None

    def _found(self, selector, element, strategy, attempted, started, context) -> ResolutionResult:
        elapsed = self.clock() - started
        self.learning_store.record_success(selector, strategy, elapsed, context)
        self._emit(
            OperationRecord(
                selector=selector,
                success=True,
                response_time_ms=elapsed,
                strategy=strategy,
                attempted=tuple(attempted),
            )
        )
        return ResolutionResult(
            selector=selector,
            element=element,
            strategy=strategy,
            attempted=tuple(attempted),
            response_time_ms=elapsed,
        )

    def _not_found(self, selector, attempted, started, context) -> ResolutionResult:
        elapsed = self.clock() - started
        log.warning("Could not resolve %s after %d strategies", selector, len(attempted))
        self.learning_store.record_failure(selector, NOT_FOUND_REASON, context)
        self._emit(
            OperationRecord(
                selector=selector,
                success=False,
                response_time_ms=elapsed,
                reason=NOT_FOUND_REASON,
                attempted=tuple(attempted),
            )
        )
        return ResolutionResult(selector=selector, attempted=tuple(attempted), response_time_ms=elapsed)

    def _emit(self, record: OperationRecord) -> None:
        if self.sink is not None:
            self.sink.emit_operation(record)
