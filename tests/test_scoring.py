from __future__ import annotations

import pytest

from selfheal.core.metadata import BoundingBox, ElementSignature
from selfheal.utils.scoring import element_similarity, levenshtein, score_candidates, string_similarity


def _signature(tag="button", element_id="", classes=(), text=""):
    return ElementSignature(
        tag=tag,
        id=element_id,
        classes=frozenset(classes),
        text=text,
        attributes={},
        bounding_box=BoundingBox(),
    )


def test_levenshtein_matches_classic_edit_distance():
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("flaw", "lawn") == 2


@pytest.mark.parametrize("value", ["a", "checkout", "Add to cart", "ünïcode"])
def test_string_similarity_of_identical_strings_is_one(value):
    assert string_similarity(value, value) == 1.0


@pytest.mark.parametrize(
    ("left", "right"),
    [
        ("kitten", "sitting"),
        ("checkout-button", "checkout-button-v2"),
        ("a", "zzzz"),
        ("Login", "Log in"),
    ],
)
def test_string_similarity_is_symmetric_and_bounded(left, right):
    forward = string_similarity(left, right)
    assert forward == string_similarity(right, left)
    assert 0.0 <= forward <= 1.0


def test_string_similarity_uses_normalized_distance():
    assert string_similarity("kitten", "sitting") == pytest.approx(4 / 7)
    assert string_similarity("", "sitting") == 0.0
    assert string_similarity("kitten", "") == 0.0


def test_element_similarity_applies_fixed_weights():
    left = _signature(element_id="buy", classes=("btn", "primary"), text="Add to cart")
    right = _signature(element_id="purchase", classes=("btn",), text="Add to cart")
    # tag 3 + text 2 + classes 2 * 1/2 + id 0, over 8
    assert element_similarity(left, right) == pytest.approx(6 / 8)
    assert element_similarity(left, left) == pytest.approx(1.0)


def test_element_similarity_scales_text_and_ignores_missing_ids():
    left = _signature(tag="a", text="kitten")
    right = _signature(tag="button", text="sitting")
    assert element_similarity(left, right) == pytest.approx((2 * 4 / 7) / 8)


def test_score_candidates_prefers_closer_signature():
    reference = _signature(element_id="login-button", classes=("btn", "btn-primary"), text="Login")
    candidates = [
        _signature(tag="div", classes=("foo",), text="Ignore"),
        _signature(element_id="login-button-v2", classes=("btn", "btn-primary"), text="Login"),
    ]
    ranked = score_candidates(reference, candidates)
    assert ranked[0][0] is candidates[1]
    assert ranked[0][1] > ranked[1][1]
