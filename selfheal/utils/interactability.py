from __future__ import annotations

import logging

from selenium.common.exceptions import WebDriverException

log = logging.getLogger(__name__)


def is_interactable(element) -> bool:
    """Checks that an element is visible, sized, enabled and not pointer-blocked.

    Inspection errors fail open: a diagnostic failure should not block the
    resolution pipeline, so the element is reported as interactable.
    """

    if element is None:
        return False
    try:
        rect = element.rect or {}
        return (
            float(rect.get("width", 0) or 0) > 0
            and float(rect.get("height", 0) or 0) > 0
            and element.value_of_css_property("visibility") != "hidden"
            and element.value_of_css_property("display") != "none"
            and str(element.value_of_css_property("opacity")) != "0"
            and element.is_enabled()
            and element.value_of_css_property("pointer-events") != "none"
        )
    except Exception as exc:  # noqa: BLE001 - fail open on any inspection error.
        log.debug("Interactability check failed open: %s", exc)
        return True


def check_condition(element, condition: str = "visible") -> bool:
    """Evaluates ``exists``, ``visible`` or ``enabled``; unknown conditions mean ``visible``."""

    if element is None:
        return False
    if condition == "exists":
        return True
    if condition == "enabled":
        return is_interactable(element) and not _is_disabled(element)
    return is_interactable(element)


def _is_disabled(element) -> bool:
    try:
        return element.get_attribute("disabled") not in (None, "false")
    except WebDriverException as exc:
        log.debug("Disabled check failed open: %s", exc)
        return False
