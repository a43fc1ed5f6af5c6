# -*- coding: utf-8 -*-
import sys
import logging

LOGGER_NAME = "safeprop"
LOG_FORMAT = "%(asctime)s - safeprop - %(levelname)s - L%(lineno)d - %(funcName)s - %(message)s"

logger = logging.getLogger(LOGGER_NAME)


def setup_logger(log_file: str = "safeprop.log", level: int = logging.INFO) -> logging.Logger:
    """Attach the stdout + file handlers once. Safe to call repeatedly."""
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    if lg.handlers:
        return lg
    fmt = logging.Formatter(LOG_FORMAT)
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt); sh.setLevel(level)
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setFormatter(fmt); fh.setLevel(level)
    lg.addHandler(sh); lg.addHandler(fh)
    lg.info(f"✅ Logger initialized (writing to {log_file})")
    return lg
