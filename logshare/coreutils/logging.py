import logging
import sys


LOG_FORMAT = "[logshare-cli] %(asctime)s - %(levelname)s - %(message)s"


def setup_logging(level=logging.INFO):
    """Setup basic logging configuration.

    Logs go to stderr; stdout is reserved for the streamed log records.
    """
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    return logging.getLogger("logshare")
