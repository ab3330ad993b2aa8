"""Main CLI entry-point."""
from __future__ import annotations

import asyncio
import sys
from typing import List, Optional

from healthprobes.config import settings
from healthprobes.core.logging.config import bootstrap_logging, shutdown_logging
from healthprobes.presentation.cli import run


def main(argv: Optional[List[str]] = None) -> int:
    bootstrap_logging(level=settings.LOG_LEVEL, log_dir=settings.LOG_DIR)
    try:
        return asyncio.run(run(sys.argv[1:] if argv is None else argv))
    finally:
        shutdown_logging()


if __name__ == "__main__":
    raise SystemExit(main())
