from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Read access to employees; CRUD screens live elsewhere."""

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_active(self, *, business_id: int, employee_ids: Optional[Sequence[int]] = None) -> Sequence[Employee]:
        """Active, non-archived employees of a business, optionally filtered by id."""

        raise NotImplementedError
