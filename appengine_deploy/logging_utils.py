import logging
import os
import sys


def setup_logging(verbosity: int = 0) -> None:
    level = logging.INFO
    # CI 러너의 디버그 모드(RUNNER_DEBUG=1)도 -v 와 같게 취급한다.
    if verbosity >= 1 or os.getenv("RUNNER_DEBUG") == "1":
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
