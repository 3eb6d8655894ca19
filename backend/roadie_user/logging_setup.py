"""
Roadie User Service — Logging Configuration
============================================

What:  Process-wide logging setup shared by both hosts.
How:   Root logger to stdout (Lambda forwards stdout to CloudWatch, uvicorn
       to the terminal) with a single line format; chatty third-party
       loggers are held at WARNING.
When:  From the FastAPI lifespan, and at import of the Lambda handler module
       (once per container).
"""

import logging
import sys

from roadie_user.config import settings


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
