"""Example: drive the clock gateway directly (no Flask).

Controllers are a thin layer; the hour-log rules live in the services.
"""

import importlib

from config import get_settings_module

from cluck.container import build_container
from cluck.core.enums import LogFamily


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    try:
        print(container.clock_gateway.lab("a@x.org", "in").to_dict())
        print(container.clock_gateway.list_pending(LogFamily.LAB))
        print(container.clock_gateway.lab("a@x.org", "out").to_dict())
    finally:
        container.scheduler.shutdown(wait=True)


if __name__ == "__main__":
    main()
