"""Utility functions for coalesce-runner."""

import logging
import os
import time
from typing import List, Optional  # pylint: disable=unused-import

def setup_logging(log_dir: Optional[str] = None,
                  level: int = logging.INFO) -> None:
    """
    Initializes logging to stdout and, optionally, to a file.

    Parameters:
        log_dir: Directory to create for runner.log (no file log if None)
        level: The root logger level

    """
    handlers: 'List[logging.Handler]' = [logging.StreamHandler()]
    if log_dir is not None:
        os.mkdir(log_dir)
        handlers.append(logging.FileHandler(os.path.join(log_dir, "runner.log")))
    logger = logging.getLogger()
    logger.setLevel(level)
    logging.Formatter.converter = time.gmtime
    formatter = \
        logging.Formatter("%(asctime)s %(name)s - %(levelname)s - %(message)s")
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
