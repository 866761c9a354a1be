from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee of one business (tenant)."""

    employee_id: int
    business_id: int
    first_name: str
    last_name: str
    employee_code: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True
    is_archived: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_assignable(self) -> bool:
        return self.is_active and not self.is_archived
