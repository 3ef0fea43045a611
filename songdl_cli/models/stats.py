"""
Dataclass for tracking interactive session statistics.
"""

import time
from dataclasses import dataclass, field


@dataclass
class SessionStats:
    """Counts what happened across all download sessions of one run."""

    downloads_started: int = 0
    downloads_succeeded: int = 0
    downloads_failed: int = 0
    files_placed: int = 0
    files_kept: int = 0
    folders_created: int = 0
    placement_errors: int = 0
    cancellations: int = 0
    start_time: float = field(default_factory=time.monotonic, repr=False)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.start_time

    @property
    def has_activity(self) -> bool:
        return self.downloads_started > 0
