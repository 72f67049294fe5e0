from __future__ import annotations

import json
from pathlib import Path

from selfheal.config.schema import HealingConfig


class ConfigLoader:
    """Loads and validates the JSON healing configuration."""

    @staticmethod
    def load(path: str | Path) -> HealingConfig:
        config_path = Path(path)
        with config_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        return HealingConfig.model_validate(payload)

    @staticmethod
    def load_or_default(path: str | Path | None) -> HealingConfig:
        if path is None or not Path(path).exists():
            return HealingConfig()
        return ConfigLoader.load(path)
