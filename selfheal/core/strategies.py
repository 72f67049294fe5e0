from __future__ import annotations

import re
from typing import Iterable

from selfheal.core.metadata import Strategy

BUTTON_ROLE_SELECTOR = 'button, [role="button"], input[type=submit], input[type=button]'
LINK_ROLE_SELECTOR = 'a, [role="link"]'
TRAILING_NUMBER_PATTERN = re.compile(r"-?\d+$")


class FallbackStrategyGenerator:
    """Derives ranked alternative selectors from the text of a selector.

    Only the selector string is inspected; the DOM is never touched, so the
    same input always yields the same ordered strategies.
    """

    def __init__(self, test_id_attributes: Iterable[str] = ("data-testid",)) -> None:
        self.test_id_attributes = tuple(test_id_attributes)
        names = "|".join(re.escape(name) for name in self.test_id_attributes)
        self._attribute_pattern = re.compile(rf"""({names})[*~|^$]?=(["'])([^"']+)\2""")

    def generate(self, original_selector: str) -> tuple[Strategy, ...]:
        strategies: list[Strategy] = []
        match = self._attribute_pattern.search(original_selector)
        if match:
            strategies.extend(self._test_id_strategies(match.group(1), match.group(3)))
        if "button" in original_selector or "btn" in original_selector:
            strategies.append(Strategy("button-role", BUTTON_ROLE_SELECTOR, 0.6))
        if "link" in original_selector:
            strategies.append(Strategy("link-role", LINK_ROLE_SELECTOR, 0.6))
        # sorted() is stable, ties keep generation order.
        return tuple(sorted(strategies, key=lambda item: item.confidence, reverse=True))

    @staticmethod
    def _test_id_strategies(attribute: str, value: str) -> list[Strategy]:
        strategies = [Strategy("partial-testid", f'[{attribute}*="{value}"]', 0.9)]
        tokens = value.split("-")
        if len(tokens) >= 2:
            strategies.append(Strategy("testid-words", f'[{attribute}*="{tokens[0]}"]', 0.7))
            if tokens[-1].isdigit():
                base_value = TRAILING_NUMBER_PATTERN.sub("", value)
                strategies.append(Strategy("base-testid", f'[{attribute}*="{base_value}"]', 0.8))
        return strategies


_default_generator = FallbackStrategyGenerator()


def generate_strategies(original_selector: str) -> tuple[Strategy, ...]:
    return _default_generator.generate(original_selector)
