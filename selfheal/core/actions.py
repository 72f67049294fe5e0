from __future__ import annotations

from typing import Any, Mapping

from selfheal.config.schema import HealingConfig
from selfheal.core.exceptions import ElementNotInteractable, HealingFailure
from selfheal.core.forms import fill_field
from selfheal.core.healer import Healer
from selfheal.core.metadata import ActionResult, FormFillResult, Strategy
from selfheal.core.resolver import DIRECT_STRATEGY, ElementResolver
from selfheal.utils.interactability import check_condition
from selfheal.utils.selectors import exact_text_xpath, link_text_xpath, partial_text_xpath

FIELD_FALLBACK_STRATEGY = "fallback-selector"
NAVIGATION_MAPPING_STRATEGY = "direct-mapping"
NAVIGATION_TEXT_STRATEGY = "text-fallback"
NAVIGATION_EXACT_TEXT_STRATEGY = "exact-text"
NAVIGATION_TESTID_STRATEGY = "testid-contains"
NAVIGATION_PARTIAL_TEXT_STRATEGY = "partial-text"
WAIT_CONDITIONS = ("exists", "visible", "enabled")


def _click(element) -> None:
    element.click()


def _no_action(element) -> None:
    return None


def _condition(name: str):
    return lambda element: check_condition(element, name)


class HealingActions:
    """High-level browser actions routed through the healing pipeline."""

    def __init__(
        self,
        driver,
        healer: Healer,
        resolver: ElementResolver,
        config: HealingConfig | None = None,
    ) -> None:
        self.driver = driver
        self.healer = healer
        self.resolver = resolver
        self.config = config or healer.config

    def act(
        self,
        action: str,
        target: str,
        payload: Any = None,
        *,
        context: dict[str, Any] | None = None,
        max_attempts: int | None = None,
    ) -> ActionResult | FormFillResult:
        normalized = action.lower()
        if normalized == "click":
            return self.click(target, context=context, max_attempts=max_attempts)
        if normalized == "fill":
            return self.fill_form(target, payload or {}, context=context, max_attempts=max_attempts)
        if normalized == "navigate":
            return self.navigate(target, context=context, max_attempts=max_attempts)
        if normalized == "wait":
            return self.wait_for(target, payload or "visible", context=context)
        raise ValueError(f"Unsupported healing action: {action}")

    def find(self, selector: str, context: dict[str, Any] | None = None):
        return self.resolver.find(selector, context)

    def click(
        self,
        selector: str,
        context: dict[str, Any] | None = None,
        max_attempts: int | None = None,
    ) -> ActionResult:
        return self.healer.heal(
            "click",
            selector,
            Strategy(DIRECT_STRATEGY, selector, 1.0),
            self.healer.generator.generate(selector),
            _click,
            context=context,
            max_attempts=max_attempts,
        )

    def fill_form(
        self,
        form_selector: str,
        form_data: Mapping[str, Any],
        context: dict[str, Any] | None = None,
        skip_missing: bool | None = None,
        max_attempts: int | None = None,
    ) -> FormFillResult:
        skip = self.config.skip_missing_fields if skip_missing is None else skip_missing
        form = self.resolver.first_match(form_selector)
        if form is None:
            raise self.healer.fail("fill", form_selector, context)
        if not form_data:
            self.healer.heal(
                "fill",
                form_selector,
                Strategy(DIRECT_STRATEGY, form_selector, 1.0),
                (),
                _no_action,
                context=context,
                ready=_condition("exists"),
            )
            return FormFillResult()

        result = FormFillResult()
        for field_name, value in form_data.items():
            primary = self.config.field_mapping.get(field_name) or f'[data-testid="{field_name}-input"]'
            try:
                result.fields[field_name] = self.healer.heal(
                    "fill",
                    primary,
                    Strategy(DIRECT_STRATEGY, primary, 1.0),
                    self._field_fallbacks(field_name),
                    lambda element, value=value: fill_field(element, value),
                    scope=form,
                    context=context,
                    max_attempts=max_attempts,
                )
            except ElementNotInteractable:
                raise
            except HealingFailure:
                if not skip:
                    raise
                result.skipped.append(field_name)
        return result

    def navigate(
        self,
        label: str,
        context: dict[str, Any] | None = None,
        max_attempts: int | None = None,
    ) -> ActionResult:
        mapped = self.config.navigation_mapping.get(label)
        direct = Strategy(NAVIGATION_MAPPING_STRATEGY, mapped, 1.0) if mapped else None
        return self.healer.heal(
            "navigate",
            mapped or label,
            direct,
            self._navigation_fallbacks(label),
            _click,
            context=context,
            max_attempts=max_attempts,
        )

    def wait_for(
        self,
        selector: str,
        condition: str = "visible",
        timeout: float | None = None,
        context: dict[str, Any] | None = None,
    ) -> ActionResult:
        """Waits until ``selector``, or its first matching fallback, meets ``condition``.

        ``condition`` is one of ``exists``, ``visible`` or ``enabled``. Raises
        ``HealingFailure`` when no candidate matches and ``ElementNotInteractable``
        when the chosen element never meets the condition within ``timeout``.
        """

        if condition not in WAIT_CONDITIONS:
            raise ValueError(f"Unsupported wait condition: {condition}")
        return self.healer.heal(
            "wait",
            selector,
            Strategy(DIRECT_STRATEGY, selector, 1.0),
            self.healer.generator.generate(selector),
            _no_action,
            context=context,
            ready=_condition(condition),
            timeout=timeout,
        )

    @staticmethod
    def _navigation_fallbacks(label: str) -> list[Strategy]:
        return [
            Strategy(NAVIGATION_TEXT_STRATEGY, link_text_xpath(label), 0.5),
            Strategy(NAVIGATION_EXACT_TEXT_STRATEGY, exact_text_xpath(label), 0.5),
            Strategy(NAVIGATION_TESTID_STRATEGY, f'[data-testid*="{label.lower()}"]', 0.4),
            Strategy(NAVIGATION_PARTIAL_TEXT_STRATEGY, partial_text_xpath(label), 0.3),
        ]

    @staticmethod
    def _field_fallbacks(field_name: str) -> list[Strategy]:
        selectors = (
            f'[data-testid="{field_name}"]',
            f"#{field_name}",
            f'[name="{field_name}"]',
            f'input[placeholder*="{field_name}" i]',
        )
        return [Strategy(FIELD_FALLBACK_STRATEGY, selector, 0.5) for selector in selectors]
