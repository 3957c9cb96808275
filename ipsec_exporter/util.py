"""Exception types and logging setup for the exporter."""

import logging

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class ExporterError(Exception):
    """Base class for all exporter errors."""


class ViciConnectionError(ExporterError):
    """Raised when a VICI session cannot be acquired or the transport fails."""


class ListingError(ExporterError):
    """Raised when the daemon flags a listing response as failed."""

    def __init__(self, command: str, message: str):
        self.command = command
        super().__init__(f"{command}: {message}" if message else command)


class DecodeError(ExporterError):
    """Raised when a response record does not have the expected shape."""

    def __init__(self, message: str, key: str = ""):
        self.key = key
        super().__init__(f"'{key}': {message}" if key else message)


class CertificateParseError(ExporterError):
    """Raised when certificate bytes are not a valid X.509 structure."""


class ConfigValidationError(ExporterError):
    """Raised when the configuration contains invalid values."""

    def __init__(self, errors: list):
        self.errors = errors
        super().__init__(f"{len(errors)} configuration error(s): " + "; ".join(errors))


def parse_log_level(name: str) -> int:
    """Map a level name like 'info' to a logging level, raising KeyError if unknown."""
    return LOG_LEVELS[name.strip().lower()]


def setup_logging(level: str = "info", verbose: bool = False):
    """Configure logging for the exporter."""
    log_level = logging.DEBUG if verbose else parse_log_level(level)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
