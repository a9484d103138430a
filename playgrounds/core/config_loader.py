from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from playgrounds.core.schemas import VenueConfig


def load_venue_config(path: str | Path) -> VenueConfig:
    """
    Load a venue configuration from a YAML file.

    Expected structure (the top-level `venue:` key is optional):
      venue:
        id: "12"
        name: "Court 1"
        price_per_hour: 15
        min_players: 2
        max_players: 10
        allow_cash: true
        allow_cliq: true
        durations:
          - {id: "d60", minutes: 60, label: "1 hour"}
    """
    venue_path = Path(path)
    if not venue_path.exists():
        raise FileNotFoundError(f"Venue config not found: {venue_path}")

    data = _load_yaml(venue_path)
    raw = data.get("venue", data)
    if not isinstance(raw, dict):
        raise ValueError(f"Venue config must be a mapping: {venue_path}")
    return VenueConfig.from_api(raw)


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}
