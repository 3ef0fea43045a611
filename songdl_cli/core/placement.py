"""
Moves the downloaded file into a folder of the music library.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from .session import SessionContext

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacementResult:
    """Outcome of one placement attempt."""

    success: bool
    destination: Path | None = None
    folder_created: bool = False
    error: str | None = None


class FilePlacementService:
    """
    Files the current artifact into `<library root>/<folder>`. Absolute names
    and names with `..` parts are refused so nothing lands outside the root.

    Errors never escape `place`: they are reported in the output log and
    returned in the result, and the session carries on.
    """

    def __init__(self, context: SessionContext):
        self.context = context

    def place(self, folder_name: str) -> PlacementResult:
        ctx = self.context
        dest_dir = ctx.config.library_root / folder_name
        source = ctx.artifact
        created = False

        try:
            if Path(folder_name).is_absolute() or ".." in Path(folder_name).parts:
                raise PermissionError(
                    f"Folder must be inside the music library: '{folder_name}'"
                )
            if not dest_dir.exists():
                dest_dir.mkdir()
                created = True
                ctx.stats.folders_created += 1
                ctx.log(f"Folder created: {folder_name}")
                ctx.events.folder_created(folder_name)

            if not source:
                raise FileNotFoundError("No downloaded file to move")

            source_path = Path(source)
            target = dest_dir / source_path.name
            if target.exists():
                raise FileExistsError(f"File exists: '{target}'")
            source_path.rename(target)
        except OSError as e:
            ctx.stats.placement_errors += 1
            ctx.log(f"Error moving file: {e}")
            ctx.events.placement_failed(source, folder_name, str(e))
            log.debug(f"Placement into '{folder_name}' failed", exc_info=True)
            return PlacementResult(False, folder_created=created, error=str(e))

        ctx.stats.files_placed += 1
        ctx.log(f"File moved to: {folder_name}")
        ctx.events.file_placed(str(source_path), str(target))
        return PlacementResult(True, destination=target, folder_created=created)
