from __future__ import annotations


class HealingError(RuntimeError):
    """Raised when an element cannot be resolved or healed."""


class InvalidStrategySelector(HealingError):
    """Raised by the query layer when a selector is syntactically unusable."""

    def __init__(self, selector: str) -> None:
        super().__init__(f"Invalid selector: {selector}")
        self.selector = selector


class ResolutionFailure(HealingError):
    """Raised when no strategy produced an interactable element."""

    def __init__(self, selector: str, attempted: tuple[str, ...] = ()) -> None:
        super().__init__(f"Could not resolve an interactable element for selector: {selector}")
        self.selector = selector
        self.attempted = attempted


class HealingFailure(HealingError):
    """Raised when an action's target never matched and no fallback healed it."""

    def __init__(self, selector: str, action: str = "click", message: str | None = None) -> None:
        super().__init__(message or f"Healing {action} failed: {selector}")
        self.selector = selector
        self.action = action


class ElementNotInteractable(HealingFailure):
    """Raised when the chosen element never became usable within the timeout."""

    def __init__(self, selector: str, action: str = "click") -> None:
        super().__init__(selector, action, f"Element is not interactable for {action}: {selector}")
