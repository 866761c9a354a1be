from __future__ import annotations

from typing import Optional, Protocol

from .model import Branch


class BranchRepository(Protocol):
    def get_by_id(self, branch_id: int) -> Optional[Branch]:
        raise NotImplementedError
