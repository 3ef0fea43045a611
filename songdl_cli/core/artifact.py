"""
Locates the file produced by the external downloader in its text output.
"""


def match_artifact(line: str, marker: str) -> str | None:
    """
    Returns the path announced by `line`, or None when it carries no marker.

    The line must start with the exact marker text; the remainder (without the
    trailing line break) is the path. A line may hold several carriage-return
    separated progress segments, each one is checked and the last match wins.
    """
    found = None
    for segment in line.rstrip("\r\n").split("\r"):
        if segment.startswith(marker):
            found = segment[len(marker) :]
    return found


class ArtifactLocator:
    """Remembers the last path announced by the downloader in one session."""

    def __init__(self, marker: str):
        self.marker = marker
        self.current: str | None = None

    def feed(self, line: str) -> str | None:
        """Checks one output line, updating the current artifact on a match."""
        path = match_artifact(line, self.marker)
        if path is not None:
            self.current = path
        return path

    def reset(self) -> None:
        self.current = None
