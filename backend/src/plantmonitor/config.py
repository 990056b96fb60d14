from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CONFIG_ENV = "PLANTMONITOR_CONFIG"
CONFIG_PATH = Path("config.json")

DEFAULT_CONFIG = {
    # 30 minutes between automatic refreshes
    "refresh_interval_s": 1800,
    "refresh_latency_s": 1.0,
    "failure_rate": 0.0,
    "seed": None,
    "plants": [
        "Monstera Deliciosa", "Snake Plant", "Peace Lily", "Rubber Plant",
        "Fiddle Leaf Fig", "Pothos", "Spider Plant", "ZZ Plant",
        "Philodendron", "Aloe Vera", "Boston Fern", "Jade Plant",
    ],
    "locations": [
        "Living Room", "Kitchen", "Bedroom", "Office",
        "Bathroom", "Balcony", "Dining Room", "Study",
    ],
}


@dataclass
class Settings:
    refresh_interval_s: float
    refresh_latency_s: float
    failure_rate: float
    seed: Optional[int]
    plants: list[str]
    locations: list[str]


def config_path() -> Path:
    return Path(os.environ.get(CONFIG_ENV) or CONFIG_PATH)


def _number(cfg: dict, key: str, lo: float, hi: Optional[float] = None) -> float:
    try:
        value = float(cfg.get(key, DEFAULT_CONFIG[key]))
    except (TypeError, ValueError):
        logger.warning("Invalid %s in config, using default", key)
        return float(DEFAULT_CONFIG[key])
    if value < lo or (hi is not None and value > hi):
        logger.warning("%s out of range in config, using default", key)
        return float(DEFAULT_CONFIG[key])
    return value


def _labels(cfg: dict, key: str) -> list[str]:
    raw = cfg.get(key)
    if not isinstance(raw, list):
        return list(DEFAULT_CONFIG[key])

    cleaned = []
    for item in raw:
        label = str(item).strip()
        if label and label not in cleaned:
            cleaned.append(label)
    return cleaned or list(DEFAULT_CONFIG[key])


def load_config(path: Optional[Path] = None) -> Settings:
    path = path or config_path()

    cfg: dict = {}
    if path.exists():
        try:
            with path.open("r", encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, ValueError):
            logger.exception("Could not read config %s, using defaults", path)
        else:
            if isinstance(loaded, dict):
                cfg = loaded
            else:
                logger.warning("Config %s is not an object, using defaults", path)

    seed = cfg.get("seed")
    if not isinstance(seed, int) or isinstance(seed, bool):
        seed = None

    return Settings(
        refresh_interval_s=_number(cfg, "refresh_interval_s", 1),
        refresh_latency_s=_number(cfg, "refresh_latency_s", 0),
        failure_rate=_number(cfg, "failure_rate", 0, 1),
        seed=seed,
        plants=_labels(cfg, "plants"),
        locations=_labels(cfg, "locations"),
    )
