from __future__ import annotations

import logging
import sys

_NOISY = ("werkzeug", "sqlalchemy.engine", "urllib3")


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))

    root.handlers.clear()
    root.addHandler(handler)

    # request lines come from app.request already
    for name in _NOISY:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))
