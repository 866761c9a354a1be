from __future__ import annotations

import logging
from typing import Optional

from werkzeug.security import check_password_hash

from ..core.enums import OverrideState
from ..core.exceptions import ValidationError
from .model import ConflictContext, OverrideDecision

logger = logging.getLogger(__name__)


class ManagerOverrideFlow:
    """Manager confirmation for a double booking.

    idle -> conflict_detected -> awaiting_code -> accepted | rejected -> idle

    A rejected code may be retried with another ``confirm`` call. An accepted
    flow authorizes exactly one assignment; ``reset`` returns it to idle.
    """

    def __init__(self, code_hash: str):
        self._code_hash = code_hash
        self._state = OverrideState.IDLE
        self._context: Optional[ConflictContext] = None

    @property
    def state(self) -> OverrideState:
        return self._state

    @property
    def context(self) -> Optional[ConflictContext]:
        return self._context

    def request_override(self, context: ConflictContext) -> dict:
        if self._state != OverrideState.IDLE:
            raise ValidationError(f"Override already in progress ({self._state.value})")
        self._context = context
        self._state = OverrideState.CONFLICT_DETECTED
        view = context.to_dict()
        self._state = OverrideState.AWAITING_CODE
        return view

    def confirm(self, manager_code: str) -> OverrideDecision:
        if self._state not in (OverrideState.AWAITING_CODE, OverrideState.REJECTED):
            raise ValidationError(f"No override is waiting for a code ({self._state.value})")

        code = (manager_code or "").strip()
        accepted = False
        if code and self._code_hash:
            try:
                accepted = check_password_hash(self._code_hash, code)
            except ValueError:
                # e.g. a plain value put in place of a generated hash
                logger.error("Manager override code hash is not a valid werkzeug hash")
                accepted = False
        self._state = OverrideState.ACCEPTED if accepted else OverrideState.REJECTED

        ctx = self._context
        if accepted:
            logger.warning(
                "Manager override accepted: employee %s double-booked on %s at branch %s",
                ctx.employee_id,
                ctx.shift_date,
                ctx.branch_id,
            )
        else:
            logger.info("Manager override rejected for employee %s on %s", ctx.employee_id, ctx.shift_date)
        return OverrideDecision(accepted=accepted)

    def reset(self) -> None:
        self._state = OverrideState.IDLE
        self._context = None
