"""Test configuration and fixtures"""

import sys
import textwrap
from pathlib import Path

import pytest

from songdl_cli.cli.keys import ENTER, KeyEvent
from songdl_cli.core.placement import PlacementResult
from songdl_cli.core.session import SessionContext
from songdl_cli.models.config import ClientConfig

FAKE_DOWNLOADER = textwrap.dedent(
    """
    import sys
    import time
    from pathlib import Path

    output, search = sys.argv[1], sys.argv[2]
    query = search.split(":", 1)[1]
    target = Path(output.replace("%(title)s", query).replace("%(ext)s", "mp3"))

    print("[youtube:search] Downloading 1 result for " + query)
    if query == "long line":
        sys.stdout.write("x" * (3 * 1024 * 1024) + "\\n")
        sys.stdout.flush()
        time.sleep(60)
    print("[download] Destination: " + str(target.with_suffix(".webm")))
    sys.stdout.write("[download]  50.0% of 3.00MiB\\r[download] 100.0% of 3.00MiB\\n")
    if query == "no marker":
        sys.exit(0)
    if query != "no file":
        target.write_bytes(b"ID3")
    print("[ExtractAudio] Destination: " + str(target))
    print("Deleting original file " + str(target.with_suffix(".webm")), file=sys.stderr)
    """
)


@pytest.fixture
def library(tmp_path):
    """Library root with two existing genre folders"""
    root = tmp_path / "Music"
    root.mkdir()
    (root / "Rock").mkdir()
    (root / "Jazz").mkdir()
    return root


@pytest.fixture
def config(library):
    return ClientConfig(library_root=library)


@pytest.fixture
def context(config):
    return SessionContext(config=config)


@pytest.fixture
def fake_downloader_config(tmp_path, library):
    """Config whose downloader is a Python script imitating yt-dlp output"""
    script = tmp_path / "fake_downloader.py"
    script.write_text(FAKE_DOWNLOADER, encoding="utf-8")
    return ClientConfig(
        library_root=library,
        downloader=sys.executable,
        command_template=f"{{downloader}} {script} {{output}} {{search}}",
    )


@pytest.fixture
def artifact(context, library):
    """A downloaded file sitting in the library root, known to the locator"""
    path = library / "test song.mp3"
    path.write_bytes(b"ID3")
    context.locator.current = str(path)
    return path


class RecordingPlacement:
    """Placement double that remembers the folders it was asked for"""

    def __init__(self):
        self.folders: list[str] = []

    def place(self, folder_name: str) -> PlacementResult:
        self.folders.append(folder_name)
        return PlacementResult(True, destination=Path(folder_name))


class SpawnRecorder:
    """Stands in for asyncio.create_task without running the coroutine"""

    def __init__(self):
        self.count = 0

    def __call__(self, coro):
        self.count += 1
        coro.close()
        return None


class ScriptedKeys:
    """Key source that replays a fixed list of events, then quits from idle"""

    def __init__(self, events: list[KeyEvent | None]):
        self.events = list(events)

    async def next_key(self, timeout: float) -> KeyEvent | None:
        if self.events:
            return self.events.pop(0)
        raise AssertionError("Key script exhausted before the loop stopped")


class RecordingScreen:
    def __init__(self):
        self.frames: list[str] = []

    def refresh(self, buffer: str) -> None:
        self.frames.append(buffer)


def type_line(text: str) -> list[KeyEvent]:
    """Key events for typing `text` and pressing Enter"""
    return [KeyEvent.character(c) for c in text] + [ENTER]


@pytest.fixture
def placement():
    return RecordingPlacement()


@pytest.fixture
def spawn():
    return SpawnRecorder()

