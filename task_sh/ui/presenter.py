"""
Terminal rendering for task-sh.

Turns an ``Outcome`` or a pipeline error into rich panels. Every piece of
text that came from the backend or the user is rendered through ``Text`` so
square brackets in commands are never read as console markup.
"""

from typing import Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from task_sh.models.command_models import Classification, Outcome
from task_sh.models.errors import BackendError, ParseError, TaskShError

_STYLES = {
    Classification.SAFE: "green",
    Classification.RISKY: "yellow",
    Classification.BLOCKED: "red",
}


class Presenter:
    """Renders generation results to a rich console."""

    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        self.console = console or Console()
        self.verbose = verbose

    def render(self, outcome: Outcome) -> None:
        """
        Render a generation outcome.

        Blocked outcomes show only the refusal and the matched rule. Safe and
        risky outcomes show the command, its explanation and any vetted
        alternatives; risky ones add a warning line.

        Args:
            outcome (Outcome): The vetted result.
        """
        if outcome.refused:
            self._render_refusal(outcome)
            return

        style = _STYLES[outcome.verdict.classification]
        body = [Text(outcome.command or "", style="bold")]
        if outcome.explanation:
            body.append(Text(""))
            body.append(Text.assemble(("Explanation: ", "bold"), outcome.explanation))

        self.console.print(
            Panel(
                Group(*body),
                title=f"Suggested command ({outcome.shell.value})",
                border_style=style,
            )
        )

        if outcome.verdict.is_risky:
            self.console.print(
                Text.assemble(
                    ("Warning: ", "bold yellow"),
                    f"{outcome.verdict.reason} (rule {outcome.verdict.matched_rule})",
                )
            )
            self.console.print("[yellow]Review the command carefully before running it.[/]")

        if outcome.guidance_only:
            self.console.print(
                "[cyan]Note:[/] the reply is guidance only; no runnable command "
                "was produced."
            )

        if outcome.alternatives:
            self.console.print("\n[bold]Alternative Commands:[/]")
            for alt in outcome.alternatives:
                line = Text("  • ")
                line.append(alt.command)
                if alt.verdict.is_risky:
                    line.append(f"  (warning: {alt.verdict.reason})", style="yellow")
                self.console.print(line)

        if self.verbose and outcome.raw_reply is not None:
            self._render_raw(outcome.raw_reply)

    def _render_refusal(self, outcome: Outcome) -> None:
        verdict = outcome.verdict
        self.console.print(
            Panel(
                Text.assemble(
                    ("The generated command was blocked by the safety filter.\n\n", "bold"),
                    ("Rule: ", "bold"),
                    verdict.matched_rule or "unknown",
                    "\n",
                    ("Reason: ", "bold"),
                    verdict.reason or "unspecified",
                ),
                title="Command refused",
                border_style="red",
            )
        )

    def _render_raw(self, raw_reply: str) -> None:
        self.console.print("\n[bold]Raw response:[/]")
        self.console.print(Text(raw_reply))

    def render_error(self, error: BaseException) -> None:
        """
        Render a pipeline error as ``Error: <message>``.

        Parse errors also show the raw reply in verbose mode.
        """
        line = Text.assemble(("Error: ", "bold red"), str(error))
        self.console.print(line)

        if isinstance(error, BackendError) and error.status_code is not None:
            self.console.print(f"[dim]HTTP status: {error.status_code}[/]")

        if isinstance(error, ParseError) and self.verbose and error.raw_reply:
            self._render_raw(error.raw_reply)

        if not isinstance(error, TaskShError):
            self.console.print("[dim]Run with --debug for details.[/]")
