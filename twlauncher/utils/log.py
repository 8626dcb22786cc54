"""
Logging setup for loguru, plus the message filter that removes potentially
sensitive information, like the user's name, from logged paths.
"""

import re
import sys
from pathlib import Path

import loguru
from loguru import logger

from twlauncher.utils.app_info import AppInfo


def anonymize_path(message: str) -> str:
    """
    Anonymize any path in the message such that it does not reveal the user name.

    The input message may or may not contain a path at all. OS agnostic.
    """
    # Windows - Only remove the username, keep the drive letter
    message = re.sub(r"([A-Za-z]:\\Users\\)[^\\]+\\", r"\1...\\", message)
    # Linux
    message = re.sub(r"/home/[^/]+/", r"/home/../", message)
    # macOS
    message = re.sub(r"/Users/[^/]+/", r"/Users/../", message)
    return message


def formatter(record: "loguru.Record") -> str:
    format_string = (
        "[{level}]"
        "[{time:YYYY-MM-DD HH:mm:ss}]"
        "[{process.id}]"
        "[{thread.name}]"
        "[{module}]"
        "[{function}][{line}]"
        " : "
    )

    record["extra"]["anonymized_message"] = anonymize_path(record["message"])
    return format_string + "{extra[anonymized_message]}\n{exception}"


def setup_logging(debug: bool | None = None, log_folder: Path | None = None) -> Path:
    """
    Replace the default loguru sink with a file sink and a WARNING+ stderr sink.

    We have log_file (foo.log) and old_log_file (foo.old.log). If old_log_file exists,
    it's removed. If log_file exists, it's renamed to old_log_file.

    :param debug: Force debug logging on or off. If None, the DEBUG marker file decides.
    :param log_folder: Folder for the log files. Defaults to the platform log folder.
    :return: Path of the active log file.
    """
    if debug is None:
        debug_file = AppInfo().debug_file
        debug = debug_file.exists() and debug_file.is_file()

    folder = log_folder if log_folder is not None else AppInfo().user_log_folder
    folder.mkdir(parents=True, exist_ok=True)

    log_file = folder / (AppInfo().app_name + ".log")
    old_log_file = folder / (AppInfo().app_name + ".old.log")
    if old_log_file.exists() and old_log_file.is_file():
        old_log_file.unlink()
    if log_file.exists() and log_file.is_file():
        log_file.rename(old_log_file)

    # Remove the default stderr logger
    logger.remove()

    logger.add(log_file, level="DEBUG" if debug else "INFO", format=formatter)
    logger.add(sys.stderr, level="WARNING", format=formatter, colorize=False)

    logger.debug("Debug logging enabled")
    return log_file
