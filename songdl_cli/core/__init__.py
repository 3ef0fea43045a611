"""
Core session engine.

`SessionMachine` is the coordinator: it interprets each line the user
submits, starting a `DownloadSessionRunner` task from the idle state and
handing the organize choices to the `FilePlacementService`. All of them share
one `SessionContext`.
"""

from .output_log import OutputLog
from .placement import FilePlacementService, PlacementResult
from .session import SessionContext, SessionState, StateFlag
from .session_runner import DownloadSessionRunner
from .state_machine import SessionMachine, dispatch

__all__ = [
    "DownloadSessionRunner",
    "FilePlacementService",
    "OutputLog",
    "PlacementResult",
    "SessionContext",
    "SessionMachine",
    "SessionState",
    "StateFlag",
    "dispatch",
]
