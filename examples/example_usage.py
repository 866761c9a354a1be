"""Example: drive the service layer without Flask.

Checks whether an employee may still submit availability through a link.
"""

import importlib
import sys

from config import get_settings_module

from src.shiftdesk.shiftdesk.container import build_container
from src.shiftdesk.shiftdesk.core.exceptions import TokenRejected


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)
    try:
        view = container.submission_guard.submission_status(sys.argv[1])
    except TokenRejected as e:
        print(f"link rejected: {e.reason.value}")
        return
    print(view.to_dict())


if __name__ == "__main__":
    main()
