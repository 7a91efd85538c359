"""Process-wide logging setup, called once from the app factory.

Human-readable single-line format on stderr; module loggers
(logging.getLogger(__name__)) propagate to the root handler installed here.
"""

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    # Idempotent: create_app() may run more than once in a process (tests)
    if not any(getattr(h, "_pay_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._pay_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
