"""Availability grid, upstream feed, and window data models."""

from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, model_validator

from fieldbook.utils import safe_number, to_bool


class HourSlot(BaseModel):
    """One 60-minute cell of the canonical grid."""
    start: str
    end: str

    @property
    def key(self) -> str:
        return f"{self.start}-{self.end}"


class AvailabilitySlot(HourSlot):
    """A canonical slot with upstream availability, blocks and price overlaid.

    A blocked slot is never available, whatever the raw feed said.
    """
    available: bool = True
    blocked: bool = False
    block_reason: Optional[str] = None
    block_status: Optional[str] = None
    price: Optional[float] = None
    past: bool = False

    @model_validator(mode="after")
    def _blocked_is_unavailable(self) -> "AvailabilitySlot":
        if self.blocked:
            self.available = False
        return self

    @property
    def bookable(self) -> bool:
        return self.available and not self.blocked and not self.past


class ContiguousWindow(BaseModel):
    """A bookable run of consecutive slots and its total price."""
    start: str
    end: str
    price: float
    duration_hours: int


class OperatingHoursOverride(BaseModel):
    """Non-standard operating window forwarded to the booking store."""
    start: str
    end: str


class FeedField(BaseModel):
    id: Optional[int] = None
    name: str = ""
    hourly_rate: float = 0.0


class FeedSlot(BaseModel):
    """Upstream availability range; may span several hours."""
    start_time: str
    end_time: str
    available: bool = True
    price: Optional[float] = None


class FeedBlockedSlot(BaseModel):
    """Upstream maintenance/event block; may span several hours."""
    start_time: str
    end_time: str
    status: str = "blocked"
    reason: Optional[str] = None


def _unwrap(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    for key in ("availability", "data"):
        inner = payload.get(key)
        if isinstance(inner, Mapping):
            return inner
    return payload


class AvailabilityFeed(BaseModel):
    """Availability payload for one field and date as consumed by the merger."""
    field: FeedField = Field(default_factory=FeedField)
    slots: list[FeedSlot] = Field(default_factory=list)
    blocked_slots: list[FeedBlockedSlot] = Field(default_factory=list)

    @classmethod
    def from_upstream(cls, payload: Optional[Mapping[str, Any]]) -> "AvailabilityFeed":
        """Normalize the key variants the availability API has used over time.

        An entry without an explicit amount keeps ``price=None`` so it cannot
        overwrite a price observed earlier; window search applies the field's
        hourly rate to unpriced segments.
        """
        if not payload:
            return cls()
        payload = _unwrap(payload)

        raw_field = payload.get("field") or {}
        hourly = safe_number(raw_field.get("hourly_rate", raw_field.get("rate")), 0.0)
        field_id = safe_number(raw_field.get("id"), None)

        slots = []
        for raw in payload.get("slots") or []:
            available = raw.get("available", raw.get("is_available", raw.get("free", True)))
            price = raw.get("price", raw.get("amount"))
            slots.append(FeedSlot(
                start_time=str(raw.get("start_time", raw.get("start")) or ""),
                end_time=str(raw.get("end_time", raw.get("end")) or ""),
                available=to_bool(available),
                price=safe_number(price, None),
            ))

        blocked_source = payload.get("blocked_slots")
        if blocked_source is None:
            blocked_source = payload.get("blocked")
        blocked = [
            FeedBlockedSlot(
                start_time=str(raw.get("start_time", raw.get("start")) or ""),
                end_time=str(raw.get("end_time", raw.get("end")) or ""),
                status=str(raw.get("status") or "blocked"),
                reason=raw.get("reason"),
            )
            for raw in blocked_source or []
        ]

        return cls(
            field=FeedField(
                id=int(field_id) if field_id is not None else None,
                name=str(raw_field.get("name") or ""),
                hourly_rate=hourly,
            ),
            slots=slots,
            blocked_slots=blocked,
        )


class AvailabilityView(BaseModel):
    """Merged grid for one field and date, ready for window search."""
    date: str
    field_id: Optional[int] = None
    hourly_rate: float
    slots: list[AvailabilitySlot] = Field(default_factory=list)
    operating_hours_override: Optional[OperatingHoursOverride] = None
    warning: Optional[str] = None
