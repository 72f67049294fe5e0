from __future__ import annotations

import logging
from typing import Any, Callable

from selenium.common.exceptions import StaleElementReferenceException

from selfheal.core.metadata import BoundingBox, ElementSignature

log = logging.getLogger(__name__)

KEY_ATTRIBUTES = ("data-testid", "role", "type", "name", "aria-label", "title", "placeholder")
MAX_TEXT_LENGTH = 100

ELEMENT_PATH_SCRIPT = r"""
let node = arguments[0];
if (!node) return "";
if (node.id) return `//*[@id="${node.id}"]`;
let path = "";
while (node && node.nodeType === Node.ELEMENT_NODE) {
  let step = node.nodeName.toLowerCase();
  if (node.id) {
    path = `/${step}[@id="${node.id}"]${path}`;
    break;
  }
  const siblings = node.parentNode ? Array.from(node.parentNode.children) : [];
  step += `[${siblings.indexOf(node) + 1}]`;
  path = `/${step}${path}`;
  node = node.parentElement;
}
return path;
"""


def extract_signature(element) -> ElementSignature | None:
    """Builds a comparable attribute bundle for a live element.

    Returns ``None`` for a missing or detached element. Any other read that
    fails leaves the corresponding field empty.
    """

    if element is None:
        return None
    try:
        tag = (element.tag_name or "").lower()
    except StaleElementReferenceException:
        return None

    element_id = _read(lambda: element.get_attribute("id")) or ""
    class_names = _read(lambda: element.get_attribute("class")) or ""
    text = _read(lambda: element.get_attribute("textContent")) or ""
    attributes: dict[str, str] = {}
    for name in KEY_ATTRIBUTES:
        value = _read(lambda name=name: element.get_attribute(name))
        if value is not None:
            attributes[name] = value
    return ElementSignature(
        tag=tag,
        id=element_id,
        classes=frozenset(item for item in class_names.split() if item),
        text=text.strip()[:MAX_TEXT_LENGTH],
        attributes=attributes,
        bounding_box=_bounding_box(_read(lambda: element.rect) or {}),
        path=_read(lambda: element.parent.execute_script(ELEMENT_PATH_SCRIPT, element)) or "",
    )


def _bounding_box(rect: dict[str, Any]) -> BoundingBox:
    return BoundingBox(
        x=float(rect.get("x", 0.0) or 0.0),
        y=float(rect.get("y", 0.0) or 0.0),
        width=float(rect.get("width", 0.0) or 0.0),
        height=float(rect.get("height", 0.0) or 0.0),
    )


def _read(reader: Callable[[], Any]) -> Any:
    try:
        return reader()
    except Exception as exc:  # noqa: BLE001 - partial signatures are preferred over errors.
        log.debug("Signature field read failed: %s", exc)
        return None
