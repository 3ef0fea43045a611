"""Tests for locating the downloaded file in downloader output"""

from songdl_cli.core.artifact import ArtifactLocator, match_artifact

MARKER = "[ExtractAudio] Destination: "


class TestMatchArtifact:
    def test_exact_prefix(self):
        line = "[ExtractAudio] Destination: /lib/test song.mp3\n"
        assert match_artifact(line, MARKER) == "/lib/test song.mp3"

    def test_windows_line_ending(self):
        line = "[ExtractAudio] Destination: /lib/a.mp3\r\n"
        assert match_artifact(line, MARKER) == "/lib/a.mp3"

    def test_lookalikes_do_not_match(self):
        assert match_artifact("[download] Destination: /lib/a.webm", MARKER) is None
        assert match_artifact("[ExtractAudio] Destination:/lib/a.mp3", MARKER) is None
        assert match_artifact("[extractaudio] destination: /lib/a.mp3", MARKER) is None
        assert match_artifact("note [ExtractAudio] Destination: /a.mp3", MARKER) is None

    def test_carriage_return_segments(self):
        line = "[download] 100%\r[ExtractAudio] Destination: /lib/b.mp3\n"
        assert match_artifact(line, MARKER) == "/lib/b.mp3"


class TestArtifactLocator:
    def test_single_marker(self):
        locator = ArtifactLocator(MARKER)
        for line in [
            "[youtube:search] Downloading 1 result\n",
            "[ExtractAudio] Destination: /lib/test song.mp3\n",
            "Deleting original file /lib/test song.webm\n",
        ]:
            locator.feed(line)
        assert locator.current == "/lib/test song.mp3"

    def test_last_occurrence_wins(self):
        locator = ArtifactLocator(MARKER)
        locator.feed("[ExtractAudio] Destination: /lib/first.mp3\n")
        locator.feed("[ExtractAudio] Destination: /lib/second.mp3\n")
        assert locator.current == "/lib/second.mp3"

    def test_no_marker_leaves_slot_empty(self):
        locator = ArtifactLocator(MARKER)
        assert locator.feed("[download] 100% of 3.00MiB\n") is None
        assert locator.current is None

    def test_reset(self):
        locator = ArtifactLocator(MARKER)
        locator.feed("[ExtractAudio] Destination: /lib/a.mp3")
        locator.reset()
        assert locator.current is None
