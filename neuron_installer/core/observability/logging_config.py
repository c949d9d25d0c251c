"""
Logging configuration — set up once by main.py before any stage runs.

Console level, highest precedence first:
    --debug, --verbose, --quiet, NEURON_INSTALLER_LOG_LEVEL, WARNING

NEURON_INSTALLER_LOG_FILE adds a file handler (always in the debug
format) at NEURON_INSTALLER_LOG_FILE_LEVEL. git, npm and go write to the
terminal directly; their output never passes through logging.
"""

from __future__ import annotations

import logging
import os
import sys

ENV_LEVEL = "NEURON_INSTALLER_LOG_LEVEL"
ENV_FILE = "NEURON_INSTALLER_LOG_FILE"
ENV_FILE_LEVEL = "NEURON_INSTALLER_LOG_FILE_LEVEL"

PACKAGE_LOGGER = "neuron_installer"

_DEBUG_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"

# (format, datefmt) by the lowest console level it applies to
_CONSOLE_FORMATS = (
    (logging.DEBUG, _DEBUG_FORMAT, "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    (logging.WARNING, "%(message)s", None),
)


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: dict[str, str] | None = None,
) -> str:
    """Console level name for the given CLI flags."""
    for flag, name in ((debug, "DEBUG"), (verbose, "INFO"), (quiet, "ERROR")):
        if flag:
            return name
    return (os.environ if environ is None else environ).get(ENV_LEVEL, "WARNING")


def _level(name: str | None) -> int:
    value = getattr(logging, (name or "").upper(), None)
    return value if isinstance(value, int) else logging.WARNING


def _console_formatter(level: int) -> logging.Formatter:
    for threshold, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            return logging.Formatter(fmt, datefmt=datefmt)
    return logging.Formatter("%(message)s")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Install the console (stderr) handler and, optionally, a file handler.

    Only ``neuron_installer.*`` loggers follow ``level``; third-party
    loggers stay at WARNING unless the console itself is at DEBUG.
    """
    console_level = _level(level)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    package_level = console_level
    if log_file:
        file_level = _level(log_file_level) if log_file_level else console_level
        to_file = logging.FileHandler(log_file, encoding="utf-8")
        to_file.setLevel(file_level)
        to_file.setFormatter(logging.Formatter(_DEBUG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(to_file)
        package_level = min(package_level, file_level)

    root.setLevel(package_level if console_level <= logging.DEBUG else logging.WARNING)
    logging.getLogger(PACKAGE_LOGGER).setLevel(package_level)
    logging.raiseExceptions = False


def setup_from_flags(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Configure logging from CLI flags and the environment. Returns the console level."""
    level = resolve_level(debug=debug, verbose=verbose, quiet=quiet)
    setup_logging(level, os.environ.get(ENV_FILE), os.environ.get(ENV_FILE_LEVEL))
    return level
