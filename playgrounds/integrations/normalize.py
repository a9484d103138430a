"""Unwrap the several response shapes the playgrounds backend returns."""

from __future__ import annotations

from typing import Any


def _ensure_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _unwrap_list(payload: Any, *keys: str) -> list[dict]:
    if not payload:
        return []
    if isinstance(payload, list):
        items = payload
    elif isinstance(payload, dict):
        items = next((payload[k] for k in keys if isinstance(payload.get(k), list)), [])
    else:
        items = []
    return [item for item in _ensure_list(items) if isinstance(item, dict)]


def normalize_slots(payload: Any) -> list[dict]:
    return _unwrap_list(payload, "slots", "data", "items")


def normalize_bookings(payload: Any) -> list[dict]:
    return _unwrap_list(payload, "bookings", "items", "data")


def normalize_venue_details(payload: Any) -> dict | None:
    if not isinstance(payload, dict):
        return None
    for key in ("venue", "data"):
        if isinstance(payload.get(key), dict):
            return payload[key]
    return payload


def normalize_booking_details(payload: Any) -> dict:
    if not isinstance(payload, dict):
        return {}
    for key in ("booking", "data"):
        if isinstance(payload.get(key), dict):
            return payload[key]
    return payload
