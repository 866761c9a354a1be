"""Issue next week's submission links for every active employee of a business.

Usage: python scripts/issue_weekly_tokens.py <business_id>
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.shiftdesk.shiftdesk.common.datetime_utils import next_week_bounds
from src.shiftdesk.shiftdesk.container import build_container
from src.shiftdesk.shiftdesk.tokens.links import weekly_submission_url


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("business_id", type=int)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        db_config=settings.DB_CONFIG,
        manager_code_hash=getattr(settings, "MANAGER_OVERRIDE_CODE_HASH", ""),
        settings=settings,
    )

    week_start, week_end = next_week_bounds()
    result = container.token_issuer.issue_for_business(
        business_id=args.business_id,
        week_start_date=week_start,
        week_end_date=week_end,
    )
    origin = getattr(settings, "PUBLIC_ORIGIN", "")
    for item in result.issued:
        print(f"{item.employee.full_name}\t{weekly_submission_url(origin, item.token.token_value)}")
    for failure in result.failures:
        print(f"FAILED {failure.employee.full_name}: {failure.error}", file=sys.stderr)


if __name__ == "__main__":
    main()
