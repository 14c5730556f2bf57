"""
Local File Sink - Load Layer

Opens local files that logs are streamed into.
"""

import os
from typing import BinaryIO
import logging

logger = logging.getLogger(__name__)


def open_file_sink(filepath: str) -> BinaryIO:
    """
    Open a local file as a binary sink, creating parent directories

    Args:
        filepath: Path of the file to (over)write

    Returns:
        BinaryIO: File opened in binary write mode
    """
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    logger.info(f"Writing logs to {filepath}")
    return open(filepath, "wb")
