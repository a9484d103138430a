"""
Draft Storage: keeps one booking-draft snapshot on disk so a wizard can resume.

File format:
    {"venue_id": "12", "draft": {"duration_id": ..., "booking_date": ..., "players": ...,
                                 "selected_slot": {...}, "payment_type": ..., "step": 1}}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class DraftStorage:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def save(self, venue_id: str, draft: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"venue_id": str(venue_id), "draft": draft}
        self.path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")

    def load(self, venue_id: str | None = None) -> dict[str, Any] | None:
        """
        Load the stored draft.

        Args:
            venue_id: When given, a draft saved for another venue is ignored.

        Returns:
            The inner draft dict, or None.
        """
        if not self.path.exists():
            return None

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable booking draft %s: %s", self.path, e)
            return None

        if not isinstance(payload, dict) or not isinstance(payload.get("draft"), dict):
            return None
        if venue_id is not None and str(payload.get("venue_id")) != str(venue_id):
            return None
        return payload["draft"]

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
