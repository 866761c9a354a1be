from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.shiftdesk.shiftdesk.core.enums import TokenKind, TokenRejectionReason
from src.shiftdesk.shiftdesk.core.exceptions import TokenRejected
from src.shiftdesk.shiftdesk.tokens.issuer import TokenIssuer
from src.shiftdesk.shiftdesk.tokens.links import (
    qr_png,
    registration_url,
    url_for_token,
    weekly_submission_url,
)
from src.shiftdesk.shiftdesk.tokens.validator import TokenValidator

NOW = datetime(2024, 3, 1, 9, 0, 0)


@pytest.fixture
def issued(tokens_repo, employees_repo):
    return TokenIssuer(tokens_repo, employees_repo).issue(1, timedelta(hours=1), now=NOW)


@pytest.fixture
def validator(tokens_repo, employees_repo):
    return TokenValidator(tokens_repo, employees_repo)


def _reason(validator, value, now):
    with pytest.raises(TokenRejected) as exc:
        validator.validate(value, now=now)
    return exc.value.reason


def test_unknown_and_blank_tokens_are_not_found(validator):
    assert _reason(validator, "nope", NOW) == TokenRejectionReason.NOT_FOUND
    assert _reason(validator, "   ", NOW) == TokenRejectionReason.NOT_FOUND


def test_expiry_boundary(validator, issued):
    one_second = timedelta(seconds=1)

    assert validator.validate(issued.token_value, now=issued.expires_at - one_second).employee_id == 1
    assert _reason(validator, issued.token_value, issued.expires_at) == TokenRejectionReason.EXPIRED
    assert _reason(validator, issued.token_value, issued.expires_at + one_second) == TokenRejectionReason.EXPIRED


def test_validate_does_not_consume(validator, tokens_repo, issued):
    first = validator.validate(issued.token_value, now=NOW)
    second = validator.validate(issued.token_value, now=NOW)

    assert first == second
    assert not tokens_repo.get_by_value(issued.token_value).is_used


def test_used_wins_over_expired(validator, tokens_repo, issued):
    tokens_repo.mark_used(token_id=issued.token_id, used_at=NOW, submitted_data=None)

    assert _reason(validator, issued.token_value, issued.expires_at + timedelta(days=1)) == TokenRejectionReason.USED


def test_check_reports_reason_without_raising(validator, issued):
    assert validator.check(issued.token_value, now=NOW) is None
    assert validator.check(issued.token_value, now=issued.expires_at) == TokenRejectionReason.EXPIRED


def test_public_links():
    assert registration_url("https://app.example.com/", "abc") == "https://app.example.com/register-employee?token=abc"
    assert weekly_submission_url("https://app.example.com", "abc") == "https://app.example.com/weekly-shift-submission/abc"
    assert url_for_token("https://x.test", TokenKind.PERMANENT, "t1") == "https://x.test/employee-shifts/t1"
    assert url_for_token("https://x.test", TokenKind.SHIFT, "t1") == "https://x.test/submit-shift/t1"


def test_qr_png_is_a_png():
    assert qr_png("https://x.test/submit-shift/t1").startswith(b"\x89PNG")
