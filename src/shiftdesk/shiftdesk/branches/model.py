from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Branch:
    branch_id: int
    business_id: int
    name: str
    address: Optional[str] = None
