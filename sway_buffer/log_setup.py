# Sway-Buffer is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Dict, Optional

FILE_FORMAT = "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"
CONSOLE_FORMAT = "%(levelname)-8s - %(name)-12s - %(message)s"


def _rotating_handler(filename: str, max_bytes: int, backup_count: int) -> logging.Handler:
    """
    Creates a rotating file handler, creating the parent directory if
    needed. Falls back to the system temp directory when `filename` is
    not writable.
    """
    log_dir = os.path.dirname(filename)
    try:
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        return logging.handlers.RotatingFileHandler(
            filename, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    except OSError as e:
        fallback = os.path.join(tempfile.gettempdir(), "sway_buffer_" + os.path.basename(filename))
        print(f"Cannot log to '{filename}': {e}. Logging to '{fallback}'.", file=sys.stderr)
        return logging.handlers.RotatingFileHandler(
            fallback, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )


def setup_logging(config: Optional[Dict[str, Any]] = None, log_dir: str = "") -> None:
    """
    Configures the logging handlers used by the buffer core.

    Up to three handlers are attached to the ``sway_buffer`` logger:

    1. **File handler** - rotating *editor.log* at ``file_level``
       (default **DEBUG**).
    2. **Console handler** - optional ``stderr`` output at
       ``console_level`` (default **WARNING**).
    3. **Error-file handler** - optional rotating *error.log* holding only
       **ERROR** and above.

    Existing handlers on the package logger are replaced, so calling this
    function twice (e.g. from tests) does not duplicate records.

    Args:
        config (dict | None): Application configuration. Only the
            ``["logging"]`` section is read; recognised keys are
            ``file_level``, ``console_level``, ``log_to_console`` and
            ``separate_error_log``.
        log_dir (str): Directory for the log files. Defaults to the current
            working directory.
    """
    logging_config = (config or {}).get("logging", {})

    file_level = getattr(logging, str(logging_config.get("file_level", "DEBUG")).upper(), logging.DEBUG)
    file_formatter = logging.Formatter(FILE_FORMAT)

    handlers = []
    logger_level = file_level

    file_handler = _rotating_handler(os.path.join(log_dir, "editor.log"), 2 * 1024 * 1024, 5)
    file_handler.setFormatter(file_formatter)
    file_handler.setLevel(file_level)
    handlers.append(file_handler)

    if logging_config.get("log_to_console", False):
        console_level = getattr(
            logging, str(logging_config.get("console_level", "WARNING")).upper(), logging.WARNING
        )
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        console_handler.setLevel(console_level)
        logger_level = min(logger_level, console_level)
        handlers.append(console_handler)

    if logging_config.get("separate_error_log", False):
        error_handler = _rotating_handler(os.path.join(log_dir, "error.log"), 1024 * 1024, 3)
        error_handler.setFormatter(file_formatter)
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)

    package_logger = logging.getLogger("sway_buffer")
    for old in list(package_logger.handlers):
        package_logger.removeHandler(old)
        old.close()
    for handler in handlers:
        package_logger.addHandler(handler)
    # The logger must pass everything any of its handlers wants.
    package_logger.setLevel(logger_level)

    package_logger.info(
        "Logging setup complete. Level: %s, handlers: %d.", logging.getLevelName(file_level), len(handlers)
    )
