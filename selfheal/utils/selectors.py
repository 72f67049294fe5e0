from __future__ import annotations

import re

TEXT_PREDICATE_PATTERN = re.compile(r"""contains?\(\s*(["'])(.+?)\1\s*\)""")


def infer_selector_type(selector: str) -> str:
    stripped = selector.strip()
    if stripped.startswith("/") or stripped.startswith("(") or stripped.startswith(".//"):
        return "xpath"
    return "css"


def has_text_predicate(selector: str) -> bool:
    return "contains(" in selector


def extract_text_literal(selector: str) -> str | None:
    """Returns the quoted literal of a ``contains("...")`` predicate, if any."""

    match = TEXT_PREDICATE_PATTERN.search(selector)
    if not match:
        return None
    return match.group(2)


def xpath_literal(value: str) -> str:
    """Quotes a string for use inside an XPath expression."""

    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    parts = value.split('"')
    return "concat(" + ", '\"', ".join(f'"{part}"' for part in parts) + ")"


def text_node_xpath(text: str) -> str:
    return f"//*[contains(text(), {xpath_literal(text)})]"


def deepest_text_xpath(text: str) -> str:
    literal = xpath_literal(text)
    return f"//*[contains(., {literal})][not(*[contains(., {literal})])]"


def link_text_xpath(text: str) -> str:
    return f"//a[contains(normalize-space(.), {xpath_literal(text)})]"


NAVIGATION_TARGETS = (
    "self::a or self::button or @role='button'"
    " or contains(concat(' ', normalize-space(@class), ' '), ' nav-link ')"
)
UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def exact_text_xpath(text: str) -> str:
    """Links, buttons and nav items whose trimmed text equals ``text``."""

    return f"//*[{NAVIGATION_TARGETS}][normalize-space(.) = {xpath_literal(text.strip())}]"


def partial_text_xpath(text: str) -> str:
    """Links, buttons and nav items containing ``text``, ignoring ASCII case."""

    lowered = xpath_literal(text.lower())
    folded = f"translate(., '{UPPERCASE}', '{UPPERCASE.lower()}')"
    return f"//*[{NAVIGATION_TARGETS}][contains({folded}, {lowered})]"
