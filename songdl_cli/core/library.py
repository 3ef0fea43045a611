"""
Reads the music library's folder layout and builds the organize menu.
"""

from pathlib import Path

from songdl_cli.exceptions import LibraryError

MENU_SEPARATOR = "-----------------------------"
NEW_FOLDER_KEY = "n"
KEEP_HERE_KEY = "q"


def list_subdirectories(library_root: Path) -> list[str]:
    """
    Returns the names of the library root's immediate subdirectories, sorted.

    Raises:
        LibraryError: If the directory cannot be listed.
    """
    try:
        names = [entry.name for entry in library_root.iterdir() if entry.is_dir()]
    except OSError as e:
        raise LibraryError(str(e)) from e
    return sorted(names)


def build_organize_menu(
    artifact: str, candidates: list[str], library_root: Path
) -> list[str]:
    """Formats the lines presented once a download has produced a file."""
    lines = [
        "--- Download finished ---",
        f"File: {Path(artifact).name}",
        "Where do you want to move the file?",
    ]
    lines.extend(f"{index}. {name}" for index, name in enumerate(candidates, 1))
    lines.extend(
        [
            MENU_SEPARATOR,
            f"{NEW_FOLDER_KEY.upper()}. Create new folder",
            f"{KEEP_HERE_KEY.upper()}. Leave in {library_root}",
            "Enter an option and press Enter:",
        ]
    )
    return lines
