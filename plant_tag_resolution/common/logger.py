"""
Pipeline logger.

Thin wrapper around the standard ``logging`` module shared by every engine,
handler and stage. Besides the usual ``debug/info/warning/error`` calls it
exposes a ``verbose`` channel that only emits when verbose output was
requested, so per-element chatter stays out of normal runs.
"""

import logging

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class PipelineLogger:
    """Leveled logger with an opt-in verbose channel."""

    def __init__(
        self,
        log_level: str = "INFO",
        verbose: bool = False,
        name: str = "plant_tag_resolution",
    ):
        self.log_level = (log_level or "INFO").upper()
        self.write_verbose = verbose
        self._threshold = _LEVELS.get(self.log_level, logging.INFO)
        self._logger = logging.getLogger(name)

    def _log(self, level: int, message: str) -> None:
        if level >= self._threshold:
            self._logger.log(level, message)

    def debug(self, message: str) -> None:
        self._log(logging.DEBUG, message)

    def info(self, message: str) -> None:
        self._log(logging.INFO, message)

    def warning(self, message: str) -> None:
        self._log(logging.WARNING, message)

    def error(self, message: str) -> None:
        self._log(logging.ERROR, message)

    def verbose(self, log_level: str, message: str) -> None:
        """Log ``message`` at ``log_level`` only when verbose output is on."""
        if not self.write_verbose:
            return
        self._log(_LEVELS.get(log_level.upper(), logging.INFO), message)
