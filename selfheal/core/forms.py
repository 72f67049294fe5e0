from __future__ import annotations

from typing import Any, Callable

from selenium.common.exceptions import NoSuchElementException
from selenium.webdriver.support.select import Select

from selfheal.core.metadata import FieldKind


def classify_field(tag: str | None, input_type: str | None = None) -> FieldKind:
    normalized_tag = (tag or "").lower()
    normalized_type = (input_type or "").lower()
    if normalized_tag == "select":
        return FieldKind.SELECT
    if normalized_type == "checkbox":
        return FieldKind.CHECKBOX
    if normalized_type == "radio":
        return FieldKind.RADIO
    return FieldKind.TEXT


def classify_element(element) -> FieldKind:
    return classify_field(element.tag_name, element.get_attribute("type"))


def _fill_select(element, value: Any) -> None:
    dropdown = Select(element)
    try:
        dropdown.select_by_visible_text(str(value))
    except NoSuchElementException:
        dropdown.select_by_value(str(value))


def _fill_checkbox(element, value: Any) -> None:
    if element.is_selected() != bool(value):
        element.click()


def _fill_radio(element, value: Any) -> None:
    if not element.is_selected():
        element.click()


def _fill_text(element, value: Any) -> None:
    element.clear()
    element.send_keys(str(value))


FIELD_HANDLERS: dict[FieldKind, Callable[[Any, Any], None]] = {
    FieldKind.SELECT: _fill_select,
    FieldKind.CHECKBOX: _fill_checkbox,
    FieldKind.RADIO: _fill_radio,
    FieldKind.TEXT: _fill_text,
}


def fill_field(element, value: Any) -> FieldKind:
    kind = classify_element(element)
    FIELD_HANDLERS[kind](element, value)
    return kind
