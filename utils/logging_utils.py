# utils/logging_utils.py

import logging
import sys
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s.%(msecs)03d - %(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_MESSAGE_LENGTH = 2000

# Base64 image payloads end up in provider errors and debug output
NOISY_LOGGERS = [
    'asyncio',
    'httpx',
    'httpcore',
    'google_genai',
    'google_genai.models',
    'hypercorn.error',
    'hypercorn.access',
    'PIL',
]


def _truncate(text: str) -> str:
    if len(text) > MAX_MESSAGE_LENGTH:
        return text[:1000] + "...[truncated]..." + text[-500:]
    return text


class UnicodeFormatter(logging.Formatter):
    """File formatter that never fails on bytes or oversized arguments."""
    def format(self, record):
        if isinstance(record.msg, bytes):
            record.msg = record.msg.decode('utf-8', errors='replace')
        elif not isinstance(record.msg, str):
            record.msg = str(record.msg)

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                arg.decode('utf-8', errors='replace') if isinstance(arg, bytes) else _truncate(str(arg))
                for arg in record.args
            )

        try:
            return super().format(record)
        except TypeError:
            # 3rd-party SDKs occasionally log with mismatched args
            record.msg = str(record.msg)
            record.args = ()
            return super().format(record)


class ColorFormatter(logging.Formatter):
    """Console formatter with per-level colors."""
    grey = "\x1b[38;21m"
    blue = "\x1b[34;21m"
    yellow = "\x1b[33;21m"
    red = "\x1b[31;21m"
    bold_red = "\x1b[31;1m"
    reset = "\x1b[0m"

    COLORS = {
        logging.DEBUG: blue,
        logging.INFO: grey,
        logging.WARNING: yellow,
        logging.ERROR: red,
        logging.CRITICAL: bold_red,
    }

    def format(self, record):
        if isinstance(record.msg, str):
            record.msg = _truncate(record.msg)
        color = self.COLORS.get(record.levelno, self.grey)
        formatter = logging.Formatter(color + LOG_FORMAT + self.reset, datefmt=DATE_FORMAT)
        try:
            return formatter.format(record)
        except TypeError:
            record.msg = str(record.msg)
            record.args = ()
            return formatter.format(record)


def setup_logging(app, debug_mode, log_file="app.log", level_name=None):
    """Configure root, app and third-party loggers once per process."""
    if debug_mode:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(level_name or 'INFO')
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ColorFormatter())
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=100000,
                backupCount=3,
                encoding='utf-8'
            )
            file_handler.setFormatter(UnicodeFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
            file_handler.setLevel(level)
            root_logger.addHandler(file_handler)
        except OSError as e:
            print(f"Warning: Could not create file handler: {e}")

    # App logger propagates to root only
    app.logger.handlers.clear()
    app.logger.propagate = True
    app.logger.setLevel(level)

    for logger_name in NOISY_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.INFO if debug_mode and logger_name.startswith('google_genai') else logging.WARNING)
        logger.handlers.clear()
        logger.propagate = True

    app.logger.info("Application logging initialized")
    if debug_mode:
        app.logger.debug("Debug mode enabled")
