"""Public, shareable links carrying a token."""

from __future__ import annotations

import io
from urllib.parse import quote, urlencode

import qrcode

from ..core.enums import TokenKind


def _origin(origin: str) -> str:
    return (origin or "").rstrip("/")


def registration_url(origin: str, token_value: str) -> str:
    return f"{_origin(origin)}/register-employee?{urlencode({'token': token_value})}"


def weekly_submission_url(origin: str, token_value: str) -> str:
    return f"{_origin(origin)}/weekly-shift-submission/{quote(token_value)}"


def shift_submission_url(origin: str, token_value: str) -> str:
    return f"{_origin(origin)}/submit-shift/{quote(token_value)}"


def employee_shifts_url(origin: str, token_value: str) -> str:
    return f"{_origin(origin)}/employee-shifts/{quote(token_value)}"


def url_for_token(origin: str, kind: TokenKind, token_value: str) -> str:
    if kind == TokenKind.WEEKLY:
        return weekly_submission_url(origin, token_value)
    if kind == TokenKind.SHIFT:
        return shift_submission_url(origin, token_value)
    if kind == TokenKind.REGISTRATION:
        return registration_url(origin, token_value)
    return employee_shifts_url(origin, token_value)


def qr_png(url: str) -> bytes:
    img = qrcode.make(url)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
