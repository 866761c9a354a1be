"""Data recorded on a token at the moment it is consumed.

Stored as JSON in ``employee_tokens.submitted_data`` with a ``kind`` tag so
each variant can be restored with its own fields. Keys a variant does not
know are ignored on load.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Union

from ..common.datetime_utils import parse_iso_date
from ..submissions.model import ShiftSlot


@dataclass(frozen=True)
class WeeklySubmissionData:
    week_start_date: str
    week_end_date: str
    shifts: Sequence[ShiftSlot]
    notes: Optional[str] = None
    optional_morning_availability: Sequence[int] = field(default_factory=tuple)

    kind = "weekly_submission"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "week_start_date": self.week_start_date,
            "week_end_date": self.week_end_date,
            "shifts": [s.to_dict() for s in self.shifts],
            "notes": self.notes,
            "optional_morning_availability": list(self.optional_morning_availability),
        }


@dataclass(frozen=True)
class ShiftRequestData:
    slot: ShiftSlot

    kind = "shift_request"

    def to_dict(self) -> dict:
        return {"kind": self.kind, "shift": self.slot.to_dict()}


@dataclass(frozen=True)
class RevokedData:
    revoked_by: Optional[int] = None

    kind = "revoked"

    def to_dict(self) -> dict:
        return {"kind": self.kind, "revoked_by": self.revoked_by}


SubmittedData = Union[WeeklySubmissionData, ShiftRequestData, RevokedData]


def dump_submitted_data(data: Optional[SubmittedData]) -> Optional[str]:
    if data is None:
        return None
    return json.dumps(data.to_dict(), ensure_ascii=False)


def load_submitted_data(raw: Any) -> Optional[SubmittedData]:
    if raw is None:
        return None
    payload = json.loads(raw) if isinstance(raw, (str, bytes, bytearray)) else dict(raw)
    kind = payload.get("kind")

    if kind == WeeklySubmissionData.kind:
        # Validate the dates eagerly so a corrupt row fails here, not later.
        parse_iso_date(payload["week_start_date"])
        parse_iso_date(payload["week_end_date"])
        return WeeklySubmissionData(
            week_start_date=payload["week_start_date"],
            week_end_date=payload["week_end_date"],
            shifts=tuple(ShiftSlot.from_dict(s) for s in payload.get("shifts") or []),
            notes=payload.get("notes"),
            optional_morning_availability=tuple(int(d) for d in payload.get("optional_morning_availability") or []),
        )
    if kind == ShiftRequestData.kind:
        return ShiftRequestData(slot=ShiftSlot.from_dict(payload["shift"]))
    if kind == RevokedData.kind:
        return RevokedData(revoked_by=payload.get("revoked_by"))

    raise ValueError(f"Unknown submitted_data kind: {kind!r}")
