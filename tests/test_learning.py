from __future__ import annotations

import json

import pytest

from selfheal.core.learning import LearningStore, element_key, hash_selector
from tests.helpers import FakeClock


def test_confidence_tracks_success_ratio():
    store = LearningStore()
    for _ in range(3):
        store.record_success("#login", "direct", 12)
    store.record_failure("#login", "not found")
    record = store.lookup("#login")
    assert record.successes == 3
    assert record.failures == 1
    assert record.confidence == pytest.approx(0.75)
    assert record.strategy_tally["direct"].successes == 3


def test_first_success_normalizes_initial_confidence():
    store = LearningStore()
    record = store.record_success("#login", "direct", 40)
    assert record.confidence == 1.0
    assert record.avg_response_time_ms == 40


def test_response_time_uses_two_point_average():
    store = LearningStore()
    store.record_success("#login", "direct", 40)
    store.record_success("#login", "direct", 20)
    store.record_success("#login", "direct", 10)
    assert store.lookup("#login").avg_response_time_ms == pytest.approx(20.0)


def test_healing_pattern_confidence_grows_and_is_capped():
    store = LearningStore()
    for _ in range(2):
        store.record_healing_success("#buy", '[data-testid*="buy"]', "partial-testid")
    assert store.pattern("#buy", "partial-testid").confidence == pytest.approx(0.7)

    for _ in range(8):
        store.record_healing_success("#buy", '[data-testid*="buy"]', "partial-testid")
    pattern = store.pattern("#buy", "partial-testid")
    assert pattern.confidence == pytest.approx(0.95)
    assert pattern.successes == 10
    assert pattern.healed_selectors == {'[data-testid*="buy"]': 10}


def test_healing_success_is_also_a_success_for_the_healed_selector():
    store = LearningStore()
    store.record_healing_success(
        "#buy", '[data-testid*="buy"]', "partial-testid", response_time_ms=30, context={"page": "cart"}
    )
    record = store.lookup('[data-testid*="buy"]', {"page": "cart"})
    assert record.successes == 1
    assert record.strategy_tally["partial-testid"].successes == 1
    assert store.lookup("#buy", {"page": "cart"}) is None


def test_unknown_selectors_read_as_neutral_prior():
    store = LearningStore()
    assert store.lookup("#nothing") is None
    assert store.confidence("#nothing") == 0.5
    assert store.pattern("#nothing", "partial-testid") is None
    assert store.preferred_healing("#nothing") is None


def test_records_are_scoped_by_page_context():
    store = LearningStore()
    store.record_success("#login", "direct", 5, {"page": "home"})
    store.record_failure("#login", "missing", {"page": "checkout"})
    assert store.confidence("#login", {"page": "home"}) == 1.0
    assert store.confidence("#login", {"page": "checkout"}) == 0.0
    assert store.lookup("#login") is None


def test_selector_hash_is_deterministic_base36():
    assert hash_selector("a") == "2p"
    assert hash_selector("") == "0"
    assert hash_selector("#login") == hash_selector("#login")
    assert hash_selector("#login") != hash_selector("#logout")
    assert element_key("a") == "unknown_2p"
    assert element_key("a", {"page": "cart"}) == "cart_2p"


def test_preferred_healing_picks_most_trusted_pattern():
    store = LearningStore()
    store.record_healing_success("#buy", '[data-testid*="buy"]', "testid-words")
    store.record_healing_success("#buy", '[data-testid*="buy-now"]', "partial-testid")
    store.record_healing_success("#buy", '[data-testid*="buy-now"]', "partial-testid")
    assert store.preferred_healing("#buy") == ('[data-testid*="buy-now"]', "partial-testid")


def test_analytics_reset_and_snapshot():
    store = LearningStore(clock=FakeClock(start=0, step=100))
    store.record_success("#login", "direct", 5)
    store.record_healing_success("#buy", '[data-testid*="buy"]', "partial-testid")
    analytics = store.analytics()
    assert analytics.learned_selectors == 2
    assert analytics.patterns == 1
    assert analytics.improvements == 1
    assert analytics.operations == 2
    assert analytics.strategies == 2
    assert analytics.session_duration_ms > 0

    payload = json.loads(json.dumps(store.snapshot()))
    assert payload["patterns"][0]["confidence"] == pytest.approx(0.6)

    store.reset()
    assert store.analytics().learned_selectors == 0
    assert store.analytics().patterns == 0
