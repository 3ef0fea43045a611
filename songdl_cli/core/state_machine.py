"""
Decides what each submitted line of input means in the current state, then
carries the decision out.

`dispatch` is a pure function: it returns the next state plus a list of
effects. `SessionMachine.submit` applies the state and runs the effects
(logging, starting a download, moving the file).
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from .library import KEEP_HERE_KEY, MENU_SEPARATOR, NEW_FOLDER_KEY
from .placement import FilePlacementService
from .session import SessionContext, SessionState
from .session_runner import DownloadSessionRunner

log = logging.getLogger(__name__)

QUIT_KEY = "q"

MSG_CANCELLED = "Operation cancelled. Enter a song name."
MSG_NEW_FOLDER_PROMPT = "Please enter the name of the new folder:"
MSG_INVALID_OPTION = "Invalid option."
MSG_INVALID_INPUT = "Invalid input. Please choose a number, 'N' or 'Q'."
MSG_EMPTY_FOLDER = "Folder name cannot be empty."
MSG_NEXT_SONG = "Enter a new song name or press 'q' to quit."


# --- Choice parsing ---------------------------------------------------------


@dataclass(frozen=True)
class ParsedIndex:
    """A valid 1-based menu choice, stored as a 0-based index."""

    index: int


@dataclass(frozen=True)
class NotANumber:
    text: str


@dataclass(frozen=True)
class OutOfRange:
    value: int


ChoiceResult = ParsedIndex | NotANumber | OutOfRange


def parse_choice(text: str, count: int) -> ChoiceResult:
    """Parses a base-10 menu number against `count` candidates."""
    stripped = text.strip()
    digits = stripped[1:] if stripped[:1] in ("+", "-") else stripped
    if not (digits.isascii() and digits.isdigit()):
        return NotANumber(text)
    value = int(stripped, 10)
    if 1 <= value <= count:
        return ParsedIndex(value - 1)
    return OutOfRange(value)


# --- Effects ----------------------------------------------------------------


@dataclass(frozen=True)
class AppendLog:
    message: str


@dataclass(frozen=True)
class StartDownload:
    query: str


@dataclass(frozen=True)
class PlaceArtifact:
    folder: str


@dataclass(frozen=True)
class KeepArtifact:
    pass


@dataclass(frozen=True)
class CancelOperation:
    previous: SessionState


@dataclass(frozen=True)
class Exit:
    pass


Effect = (
    AppendLog | StartDownload | PlaceArtifact | KeepArtifact | CancelOperation | Exit
)


@dataclass(frozen=True)
class Transition:
    state: SessionState
    effects: tuple[Effect, ...] = field(default_factory=tuple)


def _is_key(text: str, key: str) -> bool:
    return text.lower() == key


def _back_to_idle(*effects: Effect) -> Transition:
    return Transition(
        SessionState.IDLE,
        (*effects, AppendLog(MENU_SEPARATOR), AppendLog(MSG_NEXT_SONG)),
    )


def dispatch(state: SessionState, text: str, candidates: Sequence[str]) -> Transition:
    """Maps one submitted line to the next state and the effects to perform."""
    if state is SessionState.IDLE:
        if _is_key(text, QUIT_KEY):
            return Transition(state, (Exit(),))
        if not text:
            return Transition(state)
        return Transition(SessionState.DOWNLOADING, (StartDownload(text),))

    if state is SessionState.DOWNLOADING:
        if _is_key(text, QUIT_KEY):
            return Transition(
                SessionState.IDLE, (CancelOperation(state), AppendLog(MSG_CANCELLED))
            )
        return Transition(state)

    if state is SessionState.ORGANIZING:
        if _is_key(text, KEEP_HERE_KEY):
            return _back_to_idle(KeepArtifact())
        if _is_key(text, NEW_FOLDER_KEY):
            return Transition(
                SessionState.CREATING_FOLDER, (AppendLog(MSG_NEW_FOLDER_PROMPT),)
            )
        choice = parse_choice(text, len(candidates))
        if isinstance(choice, ParsedIndex):
            return _back_to_idle(PlaceArtifact(candidates[choice.index]))
        if isinstance(choice, OutOfRange):
            return _back_to_idle(AppendLog(MSG_INVALID_OPTION))
        return _back_to_idle(AppendLog(MSG_INVALID_INPUT))

    if state is SessionState.CREATING_FOLDER:
        if _is_key(text, QUIT_KEY):
            return Transition(
                SessionState.IDLE, (CancelOperation(state), AppendLog(MSG_CANCELLED))
            )
        if not text:
            return _back_to_idle(AppendLog(MSG_EMPTY_FOLDER))
        return _back_to_idle(PlaceArtifact(text))

    raise ValueError(f"Unknown session state: {state!r}")


# --- Effect execution -------------------------------------------------------


@dataclass
class SubmitResult:
    transition: Transition
    task: asyncio.Task | None = None
    exit_requested: bool = False


class SessionMachine:
    """
    Owns the session context and applies transitions decided by `dispatch`.

    Downloads are started as detached tasks through `spawn` (by default
    `asyncio.create_task`); the caller keeps the returned task handle and polls
    it. There is no cancellation: a download abandoned from the UI keeps
    running and still attempts its own transition when it finishes.
    """

    def __init__(
        self,
        context: SessionContext,
        runner: DownloadSessionRunner | None = None,
        placement: FilePlacementService | None = None,
        spawn: Callable[..., asyncio.Task] | None = None,
    ):
        self.context = context
        self.runner = runner or DownloadSessionRunner(context)
        self.placement = placement or FilePlacementService(context)
        self._spawn = spawn or asyncio.create_task

    @property
    def state(self) -> SessionState:
        return self.context.state.get()

    def submit(self, text: str) -> SubmitResult:
        """Handles one completed line of user input."""
        state = self.state
        transition = dispatch(state, text, self.context.candidates)
        result = SubmitResult(transition)

        if transition.state is not state:
            self.context.state.set(transition.state)
        leaving_menu = state in (
            SessionState.ORGANIZING,
            SessionState.CREATING_FOLDER,
        ) and transition.state is not SessionState.ORGANIZING

        for effect in transition.effects:
            self._perform(effect, result)

        if leaving_menu:
            self.context.candidates = []
        return result

    def _perform(self, effect: Effect, result: SubmitResult) -> None:
        ctx = self.context
        if isinstance(effect, AppendLog):
            ctx.log(effect.message)
        elif isinstance(effect, StartDownload):
            log.debug(f"Starting download for {effect.query!r}")
            result.task = self._spawn(self.runner.run(effect.query))
        elif isinstance(effect, PlaceArtifact):
            self.placement.place(effect.folder)
        elif isinstance(effect, KeepArtifact):
            ctx.stats.files_kept += 1
            ctx.log(f"File kept in {ctx.config.library_root}.")
        elif isinstance(effect, CancelOperation):
            ctx.stats.cancellations += 1
            ctx.events.operation_cancelled(effect.previous.value)
        elif isinstance(effect, Exit):
            result.exit_requested = True
