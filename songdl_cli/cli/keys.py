"""
Keyboard input for the interactive client.

Keys are read from the terminal in cbreak mode through the event loop's reader
callbacks, decoded into `KeyEvent`s and queued for the UI loop.
"""

import asyncio
import codecs
import logging
import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from songdl_cli.exceptions import SongdlError

log = logging.getLogger(__name__)

ESCAPE = "\x1b"


class KeyKind(Enum):
    ENTER = "enter"
    BACKSPACE = "backspace"
    CHAR = "char"


@dataclass(frozen=True)
class KeyEvent:
    kind: KeyKind
    char: str = ""

    @classmethod
    def character(cls, char: str) -> "KeyEvent":
        return cls(KeyKind.CHAR, char)


ENTER = KeyEvent(KeyKind.ENTER)
BACKSPACE = KeyEvent(KeyKind.BACKSPACE)


def decode_key(char: str) -> KeyEvent | None:
    """Maps one input character to a key event, or None if it is not handled."""
    if char in ("\r", "\n"):
        return ENTER
    if char in ("\x7f", "\b"):
        return BACKSPACE
    if len(char) == 1 and char.isprintable():
        return KeyEvent.character(char)
    return None


def decode_chunk(text: str) -> list[KeyEvent]:
    """
    Decodes a chunk read from the terminal. Anything from an escape character
    onwards (arrow keys, function keys) is dropped.
    """
    if ESCAPE in text:
        text = text[: text.index(ESCAPE)]
    return [event for event in map(decode_key, text) if event is not None]


class KeySource(Protocol):
    async def next_key(self, timeout: float) -> KeyEvent | None:
        """Waits up to `timeout` seconds for one key event."""
        ...


class TerminalKeySource:
    """
    Reads keys from stdin. Use as a context manager inside a running event
    loop; terminal attributes are restored on exit.
    """

    def __init__(self, fd: int | None = None):
        self.fd = sys.stdin.fileno() if fd is None else fd
        self._queue: asyncio.Queue[KeyEvent] = asyncio.Queue()
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="ignore")
        self._saved_attrs = None
        self._loop: asyncio.AbstractEventLoop | None = None

    def __enter__(self) -> "TerminalKeySource":
        if os.name == "nt":
            raise SongdlError("Interactive mode is only supported on POSIX terminals.")
        if not os.isatty(self.fd):
            raise SongdlError("Interactive mode needs a terminal on standard input.")

        import termios
        import tty

        self._saved_attrs = termios.tcgetattr(self.fd)
        tty.setcbreak(self.fd)
        self._loop = asyncio.get_running_loop()
        self._loop.add_reader(self.fd, self._on_readable)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        import termios

        if self._loop is not None:
            self._loop.remove_reader(self.fd)
            self._loop = None
        if self._saved_attrs is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved_attrs)
            self._saved_attrs = None
        return False

    def _on_readable(self) -> None:
        try:
            data = os.read(self.fd, 1024)
        except OSError as e:
            log.debug(f"Reading from the terminal failed: {e}")
            return
        for event in decode_chunk(self._decoder.decode(data)):
            self._queue.put_nowait(event)

    async def next_key(self, timeout: float) -> KeyEvent | None:
        try:
            return await asyncio.wait_for(self._queue.get(), timeout)
        except asyncio.TimeoutError:
            return None
