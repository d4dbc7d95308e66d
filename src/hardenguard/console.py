"""Terminal collaborators — status rendering and the Yes/No/Cancel prompt."""

from __future__ import annotations

import sys

import click

from hardenguard.models import Answer, StatusReport, StepResult


class ConsoleSink:
    """Renders run progress with click, colour-coded like the baseline scripts."""

    def __init__(self, color: bool | None = None) -> None:
        self.color = color

    def _echo(self, text: str = "", **style) -> None:
        click.echo(click.style(text, **style) if style else text, color=self.color)

    def banner(self, rule_id: str, title: str, description: str = "") -> None:
        self._echo(f"{rule_id}: {title}", fg="bright_cyan", bold=True)
        if description:
            self._echo(description)
        self._echo()

    def line(self, text: str = "") -> None:
        self._echo(text)

    def report(self, report: StatusReport, heading: str = "Check results:") -> None:
        self._echo(heading)
        if not report.findings:
            self._echo("(No matching line found)")
        for finding in report.findings:
            self._echo(finding.format(), fg=None if finding.ok else "bright_red")
        self._echo()

    def compliant(self, text: str) -> None:
        click.echo(click.style("Compliant:", fg="bright_green") + f" {text}", color=self.color)

    def non_compliant(self, text: str) -> None:
        click.echo(click.style("Non-compliant:", fg="bright_red") + f" {text}", color=self.color)

    def step(self, step: StepResult) -> None:
        if step.success:
            self._echo(f"  [ok] {step.action}")
        elif step.optional:
            self._echo(f"  [skipped] {step.action}: {step.detail}", fg="bright_yellow")
        else:
            self._echo(f"  [failed] {step.action}: {step.detail}", fg="bright_red")

    def success(self, text: str = "Successfully applied.") -> None:
        self._echo(text, fg="bright_green")

    def failure(self, text: str = "Failed to apply.") -> None:
        self._echo(text, fg="bright_red")

    def notice(self, text: str) -> None:
        self._echo(text, fg="bright_yellow")


def parse_answer(text: str) -> Answer | None:
    """Map a key press or typed line to an answer; None when unrecognised."""
    key = text.strip()[:1].lower()
    return {"y": Answer.YES, "n": Answer.NO, "c": Answer.CANCEL}.get(key)


class ClickPrompt:
    """Tri-state confirmation that keeps asking until it gets a valid answer.

    With ``single_key`` a single key press answers (no Enter needed);
    otherwise a whole line is read.
    """

    SUFFIX = " [Y]es / [N]o / [C]ancel: "

    def __init__(self, single_key: bool = True) -> None:
        self.single_key = single_key

    def _read(self) -> str:
        if self.single_key:
            key = click.getchar()
            click.echo()
            return key
        return sys.stdin.readline()

    def ask(self, question: str) -> Answer:
        while True:
            click.echo(click.style(question + self.SUFFIX, fg="bright_yellow"), nl=False)
            raw = self._read()
            if raw == "":
                # end of input: nobody left to answer
                click.echo()
                return Answer.CANCEL
            answer = parse_answer(raw)
            if answer is not None:
                return answer
            click.echo("Invalid input.")
