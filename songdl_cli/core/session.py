"""
Shared session objects handed to the state machine, the download runner and
the UI loop.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum

from songdl_cli.models.config import ClientConfig
from songdl_cli.models.stats import SessionStats
from songdl_cli.utils.structured_logger import SessionLogger, StructuredLogger

from .artifact import ArtifactLocator
from .output_log import OutputLog


class SessionState(str, Enum):
    """The mode the client is in; exactly one is active at a time."""

    IDLE = "idle"
    DOWNLOADING = "downloading"
    ORGANIZING = "organizing"
    CREATING_FOLDER = "creating_folder"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class StateFlag:
    """The current SessionState, read and written under a lock."""

    def __init__(self, initial: SessionState = SessionState.IDLE):
        self._lock = threading.Lock()
        self._state = initial

    def get(self) -> SessionState:
        with self._lock:
            return self._state

    def set(self, state: SessionState) -> SessionState:
        """Sets the state and returns the previous one."""
        with self._lock:
            previous, self._state = self._state, state
            return previous

    def __repr__(self) -> str:
        return f"StateFlag({self.get().name})"


@dataclass
class SessionContext:
    """
    Everything one interactive run shares between its components.

    `candidates` is only meaningful while the state is ORGANIZING. It is
    written before the state flag moves to ORGANIZING and cleared once the
    menu is left, including on the way into CREATING_FOLDER.
    """

    config: ClientConfig
    output_log: OutputLog = field(default_factory=OutputLog)
    state: StateFlag = field(default_factory=StateFlag)
    stats: SessionStats = field(default_factory=SessionStats)
    events: SessionLogger | None = None
    locator: ArtifactLocator | None = None
    candidates: list[str] = field(default_factory=list)

    def __post_init__(self):
        if self.locator is None:
            self.locator = ArtifactLocator(self.config.completion_marker)
        if self.events is None:
            self.events = SessionLogger(
                StructuredLogger("songdl_cli", log_dir=None, enable_json=False)
            )

    @property
    def artifact(self) -> str | None:
        return self.locator.current

    def log(self, line: str) -> None:
        self.output_log.append(line)
