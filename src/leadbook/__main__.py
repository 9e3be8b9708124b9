"""Leadbook entrypoint.

Run with:
  python -m leadbook
"""

import uvicorn

from leadbook.config import Settings, server_options
from leadbook.observability import setup_logging


def main() -> None:
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_format)
    opts = server_options()
    uvicorn.run("leadbook.app:app", host=opts["host"], port=opts["port"], reload=opts["reload"])


if __name__ == "__main__":
    main()
