from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

UNAVAILABLE_SLOT_STATUSES = {"booked", "unavailable", "blocked", "reserved"}


class PaymentType(str, Enum):
    CASH = "cash"
    CASH_ON_DATE = "cashOnDate"
    CLIQ = "cliq"


class Duration(BaseModel):
    id: str
    minutes: int
    label: str = ""
    base_price: Optional[float] = None
    is_default: bool = False

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "Duration":
        minutes = raw.get("minutes") if raw.get("minutes") is not None else raw.get("duration_minutes")
        price = raw.get("base_price") if raw.get("base_price") is not None else raw.get("price")
        return cls(
            id=str(raw.get("id", "")),
            minutes=int(minutes or 0),
            label=str(raw.get("label") or raw.get("name") or ""),
            base_price=float(price) if price is not None else None,
            is_default=bool(raw.get("is_default", False)),
        )


class Slot(BaseModel):
    id: Optional[str] = None
    start_time: str = ""
    end_time: str = ""
    label: str = ""
    is_available: bool = True

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "Slot":
        if "is_available" in raw:
            available = bool(raw["is_available"])
        elif "available" in raw:
            available = bool(raw["available"])
        else:
            available = str(raw.get("status") or "").lower() not in UNAVAILABLE_SLOT_STATUSES

        slot_id = raw.get("id")
        return cls(
            id=str(slot_id) if slot_id is not None else None,
            start_time=str(raw.get("start_time") or raw.get("start") or ""),
            end_time=str(raw.get("end_time") or raw.get("end") or ""),
            label=str(raw.get("label") or ""),
            is_available=available,
        )

    @property
    def key(self) -> str:
        """Identity used to find the same slot in a refetched list."""
        return self.id or self.start_time or self.label

    @property
    def display_label(self) -> str:
        if self.label:
            return self.label
        if self.start_time and self.end_time:
            return f"{self.start_time} - {self.end_time}"
        return self.start_time or self.end_time or "Slot"


class VenueConfig(BaseModel):
    """Read-only venue configuration consumed at wizard start."""

    id: str
    name: str = ""
    price_per_hour: float = 0.0
    min_players: int = 1
    max_players: int = 99
    allow_cash: bool = True
    allow_cash_on_date: bool = False
    allow_cliq: bool = False
    currency: str = "JOD"
    academy_profile_id: Optional[str] = None
    activity_id: Optional[str] = None
    cliq_name: str = ""
    cliq_number: str = ""
    durations: list[Duration] = Field(default_factory=list)

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "VenueConfig":
        academy = raw.get("academy_profile") or {}

        def flag(name: str, default: bool) -> bool:
            if isinstance(academy.get(name), bool):
                return academy[name]
            if isinstance(raw.get(name), bool):
                return raw[name]
            return default

        price = raw.get("price_per_hour") if raw.get("price_per_hour") is not None else raw.get("price")
        raw_durations = raw.get("durations") or raw.get("venue_durations") or raw.get("duration") or []
        academy_profile_id = raw.get("academy_profile_id") or academy.get("id")
        activity_id = raw.get("activity_id")

        return cls(
            id=str(raw.get("id", "")),
            name=str(raw.get("name") or raw.get("title") or ""),
            price_per_hour=float(price or 0),
            min_players=int(raw.get("min_players") or 1),
            max_players=int(raw.get("max_players") or 99),
            allow_cash=flag("allow_cash", True),
            allow_cash_on_date=flag("allow_cash_on_date", False) or flag("allow_cash_payment_on_date", False),
            allow_cliq=flag("allow_cliq", False),
            currency=str(raw.get("currency") or "JOD"),
            academy_profile_id=str(academy_profile_id) if academy_profile_id is not None else None,
            activity_id=str(activity_id) if activity_id is not None else None,
            cliq_name=str(academy.get("cliq_name") or raw.get("cliq_name") or ""),
            cliq_number=str(academy.get("cliq_number") or raw.get("cliq_number") or ""),
            durations=[Duration.from_api(d) for d in raw_durations if isinstance(d, dict)],
        )

    def allowed_payment_types(self) -> list[PaymentType]:
        allowed: list[PaymentType] = []
        if self.allow_cash:
            allowed.append(PaymentType.CASH)
        if self.allow_cash_on_date:
            allowed.append(PaymentType.CASH_ON_DATE)
        if self.allow_cliq:
            allowed.append(PaymentType.CLIQ)
        return allowed

    def find_duration(self, duration_id: str) -> Optional[Duration]:
        return next((d for d in self.durations if d.id == str(duration_id)), None)

    def default_duration(self) -> Optional[Duration]:
        return next((d for d in self.durations if d.is_default), None) or (
            self.durations[0] if self.durations else None
        )


class ReceiptAsset(BaseModel):
    """Locally picked CliQ transfer receipt."""

    path: Path

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


class BookingSummary(BaseModel):
    booking_id: Optional[str] = None
    venue_name: str = ""
    date: str = ""
    slot_label: str = ""
    players: Optional[int] = None
    payment_type: Optional[str] = None
    total_price: float = 0.0
    currency: str = "JOD"
    status: Optional[str] = None
