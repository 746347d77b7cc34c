"""Logging for runner consoles.

Records go to stdout, which the Actions runner shows as the step log. When
running inside Actions (GITHUB_ACTIONS=true) warnings and errors are written
as ``::warning::`` / ``::error::`` workflow commands so failed merges show
up as annotations on the run.

Configure via the YAML config (logging.level, logging.format) or env
(LOGGING_LEVEL, LOGGING_FORMAT).
"""

import logging
import os
import sys
from typing import Mapping

from branch_merge.actions import escape_data
from branch_merge.config import LoggingConfig

DEFAULT_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _resolve_level(level: str) -> int:
    """Level name to logging constant; INFO when the name is unknown."""
    value = logging.getLevelName(level.upper().strip())
    return value if isinstance(value, int) else logging.INFO


def running_in_actions(env: Mapping[str, str] | None = None) -> bool:
    env = os.environ if env is None else env
    return env.get("GITHUB_ACTIONS", "").lower() == "true"


class AnnotationFormatter(logging.Formatter):
    """Wraps WARNING and above in workflow commands."""

    COMMANDS = {logging.WARNING: "warning", logging.ERROR: "error", logging.CRITICAL: "error"}

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        command = self.COMMANDS.get(record.levelno)
        if command is None:
            return text
        return f"::{command}::{escape_data(text)}"


class MergeLogging:
    """Configures the root logger from LoggingConfig."""

    def __init__(self, config: LoggingConfig, annotate: bool | None = None) -> None:
        self._level = _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT
        self._annotate = running_in_actions() if annotate is None else annotate

    def setup(self) -> None:
        formatter_cls = AnnotationFormatter if self._annotate else logging.Formatter
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter_cls(self._format))
        logging.basicConfig(level=self._level, handlers=[handler], force=True)
