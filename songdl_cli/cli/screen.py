"""
Draws the interactive client with a Rich Live display: a bordered frame, the
trailing lines of the output log and the input prompt.
"""

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from songdl_cli.core.session import SessionContext, SessionState

TITLE = " Music Download Client "
PROMPT = "> "
CURSOR = "█"

# Frame border (2) + rule above the prompt (1) + prompt line (1)
CHROME_HEIGHT = 4

STATE_STYLES = {
    SessionState.IDLE: "green",
    SessionState.DOWNLOADING: "yellow",
    SessionState.ORGANIZING: "cyan",
    SessionState.CREATING_FOLDER: "magenta",
}


class Screen:
    """Renders the session onto the terminal, once per UI tick."""

    def __init__(self, console: Console, context: SessionContext):
        self.console = console
        self.context = context
        self._live: Live | None = None

    @property
    def log_height(self) -> int:
        return max(1, self.console.size.height - CHROME_HEIGHT)

    def _generate_log(self) -> Text:
        height = self.log_height
        lines = self.context.output_log.tail(height)
        # Pad so the prompt stays pinned to the bottom of the frame.
        lines += [""] * (height - len(lines))
        # Plain Text: downloader output is full of [brackets] that are not markup.
        return Text("\n".join(lines), no_wrap=True, overflow="crop")

    def _generate_prompt(self, buffer: str) -> Text:
        # Keep the cursor in view by scrolling long input to its end.
        room = max(1, self.console.size.width - 4 - len(PROMPT) - len(CURSOR))
        prompt = Text(PROMPT, style="bold cyan", no_wrap=True, overflow="crop")
        prompt.append(buffer[-room:])
        prompt.append(CURSOR, style="blink")
        return prompt

    def render(self, buffer: str) -> Panel:
        state = self.context.state.get()
        style = STATE_STYLES.get(state, "white")
        return Panel(
            Group(
                self._generate_log(),
                Rule(style="dim"),
                self._generate_prompt(buffer),
            ),
            title=f"[bold cyan]{TITLE}[/bold cyan]",
            subtitle=f"[{style}]{state.label}[/{style}]",
            border_style="cyan",
            height=self.console.size.height,
        )

    def refresh(self, buffer: str) -> None:
        if self._live is not None:
            self._live.update(self.render(buffer), refresh=True)

    def __enter__(self) -> "Screen":
        self._live = Live(
            self.render(""),
            console=self.console,
            screen=True,
            auto_refresh=False,
            transient=True,
        )
        self._live.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._live is not None:
            self._live.stop()
            self._live = None
        return False
