"""
Structured logging system for better log analysis and debugging.
Provides JSON-formatted logs with context and metadata.
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class StructuredLogger:
    """
    Logger that outputs both human-readable and machine-parseable logs.

    Usage:
        logger = StructuredLogger("songdl_cli")
        logger.info("download_started", query="test song", library="/music")
    """

    def __init__(
        self,
        name: str,
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            log_dir: Directory for JSON log files (None = disabled)
            enable_json: Enable JSON file logging
            enable_console: Forward events to the standard logger
        """
        self.name = name
        self.log_dir = log_dir
        self.enable_json = enable_json and log_dir is not None
        self.enable_console = enable_console

        self._logger = logging.getLogger(name)

        self._json_file = None
        self.json_log_path: Path | None = None
        if self.enable_json:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.json_log_path = log_dir / f"songdl_{timestamp}.jsonl"
            self._json_file = open(self.json_log_path, "a", encoding="utf-8")  # noqa: SIM115

        # Session context (added to all log entries)
        self._session_context: dict[str, Any] = {
            "session_id": f"{int(time.time())}_{id(self)}",
            "start_time": datetime.now().isoformat(),
        }

    def set_session_context(self, **kwargs) -> None:
        """Set session-level context that appears in all logs."""
        self._session_context.update(kwargs)

    def _format_message(self, event: str, **context) -> str:
        parts = [f"[{event}]"]
        for key, value in context.items():
            if key not in ("level", "timestamp"):
                parts.append(f"{key}={value}")
        return " ".join(parts)

    def _write_json(self, level: str, event: str, **context) -> None:
        """Write structured log entry to JSON file."""
        if not self._json_file or self._json_file.closed:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "event": event,
            **self._session_context,
            **context,
        }

        try:
            self._json_file.write(json.dumps(entry, default=str) + "\n")
            self._json_file.flush()
        except (OSError, ValueError) as e:
            print(f"JSON logging failed: {e}", file=sys.stderr)

    def _emit(self, level: int, event: str, **context) -> None:
        if self.enable_console:
            # Event names are bracketed, which rich would read as markup tags.
            self._logger.log(
                level,
                self._format_message(event, **context),
                extra={"markup": False},
            )
        if self.enable_json:
            self._write_json(logging.getLevelName(level), event, **context)

    def debug(self, event: str, **context) -> None:
        self._emit(logging.DEBUG, event, **context)

    def info(self, event: str, **context) -> None:
        self._emit(logging.INFO, event, **context)

    def warning(self, event: str, **context) -> None:
        self._emit(logging.WARNING, event, **context)

    def error(self, event: str, **context) -> None:
        self._emit(logging.ERROR, event, **context)

    def close(self) -> None:
        """Close JSON log file."""
        if self._json_file and not self._json_file.closed:
            self._json_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class SessionLogger:
    """Specialized logger for download session events."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def download_started(self, query: str, command: str):
        self.logger.info("download_started", query=query, command=command)

    def download_finished(self, query: str, artifact: str, return_code: int | None):
        self.logger.info(
            "download_finished",
            query=query,
            artifact=artifact,
            return_code=return_code,
        )

    def download_launch_failed(self, query: str, error: str):
        self.logger.error("download_launch_failed", query=query, error=error)

    def artifact_missing(self, query: str, artifact: str | None, return_code: int | None):
        """Log a finished download whose output file could not be identified."""
        self.logger.warning(
            "artifact_missing",
            query=query,
            artifact=artifact,
            return_code=return_code,
        )

    def folder_created(self, folder: str):
        self.logger.info("folder_created", folder=folder)

    def file_placed(self, source: str, destination: str):
        self.logger.info("file_placed", source=source, destination=destination)

    def placement_failed(self, source: str | None, folder: str, error: str):
        self.logger.error(
            "placement_failed", source=source, folder=folder, error=error
        )

    def operation_cancelled(self, state: str):
        self.logger.info("operation_cancelled", state=state)


def create_structured_logger(
    log_dir: Path | None = None,
    enable_json: bool = True,
    enable_console: bool = True,
) -> tuple[StructuredLogger, SessionLogger]:
    """
    Create the structured loggers.

    Returns:
        Tuple of (base_logger, session_logger)
    """
    base = StructuredLogger(
        "songdl_cli",
        log_dir=log_dir,
        enable_json=enable_json,
        enable_console=enable_console,
    )
    return base, SessionLogger(base)
