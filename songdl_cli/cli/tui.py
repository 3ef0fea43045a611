"""
The interactive client's main loop: one key event per tick, dispatched to the
session state machine, followed by a redraw.
"""

import asyncio
import logging
from typing import Protocol

from songdl_cli.core.session import SessionState
from songdl_cli.core.state_machine import SessionMachine

from .keys import KeyEvent, KeyKind, KeySource

log = logging.getLogger(__name__)

WELCOME_LINES = (
    "Welcome. Type the name of a song and press Enter.",
    "Type 'q' and press Enter to quit.",
)


class Renderer(Protocol):
    def refresh(self, buffer: str) -> None: ...


class InputRenderLoop:
    """
    Single-threaded cooperative UI loop.

    The pending input buffer belongs to this loop alone. Downloads started by
    the state machine run as separate tasks; their handles are kept here and
    checked every tick so failures surface in the output log.
    """

    def __init__(
        self,
        machine: SessionMachine,
        keys: KeySource,
        screen: Renderer,
        poll_interval: float = 0.1,
    ):
        self.machine = machine
        self.keys = keys
        self.screen = screen
        self.poll_interval = poll_interval
        self.buffer = ""
        self.tasks: set[asyncio.Task] = set()

    def handle_key(self, event: KeyEvent) -> bool:
        """Applies one key event. Returns False once the user has quit."""
        if event.kind is KeyKind.ENTER:
            line, self.buffer = self.buffer, ""
            result = self.machine.submit(line)
            if result.task is not None:
                self.tasks.add(result.task)
            return not result.exit_requested
        if event.kind is KeyKind.BACKSPACE:
            self.buffer = self.buffer[:-1]
        elif event.kind is KeyKind.CHAR:
            self.buffer += event.char
        return True

    def reap_tasks(self) -> None:
        """Collects finished download tasks without waiting on running ones."""
        for task in [t for t in self.tasks if t.done()]:
            self.tasks.discard(task)
            if task.cancelled():
                continue
            if (exc := task.exception()) is not None:
                log.error(f"Download task failed: {exc}", exc_info=exc)
                self.machine.context.log(f"Error: download failed unexpectedly: {exc}")
                if self.machine.state is SessionState.DOWNLOADING:
                    self.machine.context.state.set(SessionState.IDLE)

    async def tick(self) -> bool:
        """Runs one iteration: wait for a key, apply it, reap, redraw."""
        event = await self.keys.next_key(self.poll_interval)
        keep_running = True
        if event is not None:
            keep_running = self.handle_key(event)
        self.reap_tasks()
        if keep_running:
            self.screen.refresh(self.buffer)
        return keep_running

    async def run(self) -> None:
        self.screen.refresh(self.buffer)
        while await self.tick():
            pass
        if self.tasks:
            log.debug(f"Leaving {len(self.tasks)} download(s) unfinished on exit.")
