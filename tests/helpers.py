from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterable, Iterator
from urllib.parse import quote

import pytest
from selenium import webdriver
from selenium.common.exceptions import (
    InvalidSelectorException,
    StaleElementReferenceException,
    WebDriverException,
)
from selenium.webdriver import ChromeOptions, FirefoxOptions

DEFAULT_STYLES = {
    "visibility": "visible",
    "display": "block",
    "opacity": "1",
    "pointer-events": "auto",
}


class FakeElement:
    """In-memory stand-in for a Selenium WebElement."""

    def __init__(
        self,
        tag: str = "div",
        attributes: dict[str, str] | None = None,
        text: str = "",
        rect: dict[str, float] | None = None,
        styles: dict[str, str] | None = None,
        enabled: bool = True,
        selected: bool = False,
        matches: dict[str, list[Any]] | None = None,
        driver: Any = None,
        stale: bool = False,
        broken_styles: bool = False,
        broken_attributes: bool = False,
        click_errors: Iterable[Exception] = (),
    ) -> None:
        self._tag = tag
        self.attributes = dict(attributes or {})
        self.text = text
        self._rect = rect if rect is not None else {"x": 10.0, "y": 20.0, "width": 120.0, "height": 32.0}
        self.styles = {**DEFAULT_STYLES, **(styles or {})}
        self.enabled = enabled
        self.selected = selected
        self.matches = matches or {}
        self.parent = driver
        self.stale = stale
        self.broken_styles = broken_styles
        self.broken_attributes = broken_attributes
        self.click_errors = list(click_errors)
        self.clicks = 0
        self.typed: list[str] = []
        self.cleared = 0

    @property
    def tag_name(self) -> str:
        if self.stale:
            raise StaleElementReferenceException("element is not attached to the page document")
        return self._tag

    @property
    def rect(self) -> dict[str, float]:
        if self.broken_styles:
            raise WebDriverException("could not compute layout")
        return self._rect

    def get_attribute(self, name: str):
        if self.broken_attributes:
            raise WebDriverException(f"could not read {name}")
        if name == "textContent":
            return self.text
        return self.attributes.get(name)

    def value_of_css_property(self, name: str) -> str:
        if self.broken_styles:
            raise WebDriverException("could not compute style")
        return self.styles.get(name, "")

    def is_enabled(self) -> bool:
        return self.enabled

    def is_selected(self) -> bool:
        return self.selected

    def click(self) -> None:
        if self.click_errors:
            raise self.click_errors.pop(0)
        self.clicks += 1
        if self.attributes.get("type") == "checkbox":
            self.selected = not self.selected
        elif self.attributes.get("type") == "radio":
            self.selected = True

    def clear(self) -> None:
        self.cleared += 1
        self.typed.clear()

    def send_keys(self, value: str) -> None:
        self.typed.append(value)

    def find_elements(self, by: str, selector: str) -> list[Any]:
        return list(self.matches.get(selector, []))


class FakeDriver:
    """Answers queries from a selector -> elements table and records every query."""

    def __init__(
        self,
        matches: dict[str, list[Any]] | None = None,
        invalid: Iterable[str] = (),
        path: str = "/html/body/button[1]",
    ) -> None:
        self.matches = matches or {}
        self.invalid = set(invalid)
        self.path = path
        self.queries: list[tuple[str, str]] = []

    def find_elements(self, by: str, selector: str) -> list[Any]:
        self.queries.append((by, selector))
        if selector in self.invalid:
            raise InvalidSelectorException(f"invalid selector: {selector}")
        return list(self.matches.get(selector, []))

    def execute_script(self, script: str, *args):
        return self.path

    def queried_selectors(self) -> list[str]:
        return [selector for _, selector in self.queries]


class FakeClock:
    """Monotonic millisecond clock advancing by a fixed step on every read."""

    def __init__(self, start: float = 1000.0, step: float = 10.0) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


@contextmanager
def managed_driver(browser_name: str = "chrome", headless: bool = True) -> Iterator[Any]:
    """Starts a real browser through Selenium Manager, skipping when none is available."""

    normalized = browser_name.lower()
    try:
        if normalized == "chrome":
            options = ChromeOptions()
            if headless:
                options.add_argument("--headless=new")
            options.add_argument("--window-size=1440,1200")
            driver = webdriver.Chrome(options=options)
        elif normalized == "firefox":
            options = FirefoxOptions()
            if headless:
                options.add_argument("-headless")
            driver = webdriver.Firefox(options=options)
        else:
            raise ValueError(f"Unsupported browser: {browser_name}")
    except WebDriverException as exc:
        pytest.skip(f"WebDriver could not start for {browser_name}: {exc}")
    driver.implicitly_wait(0)
    try:
        yield driver
    finally:
        driver.quit()


def open_page(driver, markup: str) -> None:
    driver.get("data:text/html;charset=utf-8," + quote(markup))
