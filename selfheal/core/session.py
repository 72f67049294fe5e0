from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from selfheal.config.schema import HealingConfig
from selfheal.core.actions import HealingActions
from selfheal.core.healer import Healer
from selfheal.core.learning import LearningStore
from selfheal.core.resolver import ElementResolver, monotonic_ms
from selfheal.core.strategies import FallbackStrategyGenerator
from selfheal.logging.audit import HealingAuditLogger, MemoryTelemetrySink


@dataclass(slots=True)
class HealingSession:
    driver: object
    config: HealingConfig
    learning_store: LearningStore
    sink: object
    resolver: ElementResolver
    healer: Healer
    actions: HealingActions

    def reset(self) -> None:
        """Starts a new session boundary with an empty learning store."""

        self.learning_store.reset()


def create_session(
    driver,
    config: HealingConfig | None = None,
    sink=None,
    clock: Callable[[], float] | None = None,
    audit: bool = False,
) -> HealingSession:
    """Builds one learning store and the resolver, healer and actions sharing it.

    Without an explicit ``sink``, telemetry goes to memory, or to JSON lines
    under ``config.telemetry_root`` when ``audit`` is set.
    """

    config = config or HealingConfig()
    if sink is None:
        sink = HealingAuditLogger(config.telemetry_root) if audit else MemoryTelemetrySink()
    clock = clock or monotonic_ms
    learning_store = LearningStore(clock=clock)
    generator = FallbackStrategyGenerator(config.test_id_attributes)
    resolver = ElementResolver(driver, learning_store, sink, generator, clock)
    healer = Healer(driver, learning_store, sink, config, generator, clock)
    actions = HealingActions(driver, healer, resolver, config)
    return HealingSession(
        driver=driver,
        config=config,
        learning_store=learning_store,
        sink=sink,
        resolver=resolver,
        healer=healer,
        actions=actions,
    )
