"""HardenGuard CLI — Click-based command-line interface.

Commands:
  run     Check one rule and, with confirmation, remediate it
  audit   Read-only compliance sweep over many rules
  rules   List loaded rules
  show    Show one rule and its checks
"""

from __future__ import annotations

import logging
import sys

import click

from hardenguard import __version__
from hardenguard.models import ExitOutcome


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def _make_checker(ctx: click.Context, prompt=None):
    from hardenguard.check.checker import ComplianceChecker

    opts = ctx.obj
    return ComplianceChecker(
        rules_dir=opts["rules_dir"],
        include_builtin=opts["builtin"],
        root=opts["root"],
        prompt=prompt,
    )


def _get_rule_or_exit(checker, rule_id: str):
    try:
        return checker.get_rule(rule_id)
    except KeyError:
        click.echo(click.style(f"Unknown rule: {rule_id}", fg="red"), err=True)
        sys.exit(ExitOutcome.FAILED.code)


@click.group()
@click.version_option(version=__version__, prog_name="HardenGuard")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--root", default="/", envvar="HARDENGUARD_ROOT", show_default=True,
              type=click.Path(file_okay=False),
              help="Filesystem root to inspect and remediate")
@click.option("-r", "--rules-dir", envvar="HARDENGUARD_RULES_DIR",
              type=click.Path(exists=True, file_okay=False),
              help="Additional rules directory")
@click.option("--no-builtin", is_flag=True, help="Do not load the built-in rule catalog")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, root: str, rules_dir: str | None,
        no_builtin: bool) -> None:
    """HardenGuard — check and remediate Linux hardening rules.

    Each rule inspects the host, reports what it found and, after you
    confirm, applies its fix and checks again.
    """
    _setup_logging(verbose)
    ctx.obj = {"root": root, "rules_dir": rules_dir, "builtin": not no_builtin}


@cli.command()
@click.argument("rule_id")
@click.option("-y", "--yes", "assume_yes", is_flag=True,
              help="Apply the fix without asking")
@click.option("--no-input", is_flag=True,
              help="Never prompt; report and exit 1 when non-compliant")
@click.pass_context
def run(ctx: click.Context, rule_id: str, assume_yes: bool, no_input: bool) -> None:
    """Check RULE_ID and offer to remediate it.

    \b
    Exit codes:
      0  compliant (already, or after remediation)
      1  non-compliant and skipped
      2  canceled
      3  remediation failed or not permitted
    """
    from hardenguard.console import ClickPrompt
    from hardenguard.models import Answer

    prompt = None if no_input else ClickPrompt(single_key=sys.stdin.isatty())
    checker = _make_checker(ctx, prompt=prompt)
    rule = _get_rule_or_exit(checker, rule_id)

    result = checker.run_rule(rule.rule_id, interactive=not no_input,
                              assume=Answer.YES if assume_yes else None)
    ctx.exit(result.exit_code)


@cli.command()
@click.argument("rule_ids", nargs=-1)
@click.option("-o", "--output", type=click.Path(dir_okay=False), help="Output report file")
@click.option("--format", "fmt", type=click.Choice(["text", "json", "csv"]),
              default="text", help="Report format")
@click.pass_context
def audit(ctx: click.Context, rule_ids: tuple[str, ...], output: str | None, fmt: str) -> None:
    """Inspect rules without changing anything (all rules by default)."""
    from hardenguard.report.generator import ReportGenerator

    checker = _make_checker(ctx)
    reporter = ReportGenerator()

    ids = [_get_rule_or_exit(checker, r).rule_id for r in rule_ids]
    report = checker.audit(ids or None)

    if fmt != "text" and not output:
        click.echo(reporter.generate(report, fmt))
    else:
        _display_score(report.compliance_score)
        click.echo(f"Rules checked: {report.total_rules_checked}")
        click.echo(f"  Compliant:     {report.compliant_count}")
        click.echo(f"  Non-compliant: {len(report.non_compliant)}")
        if report.non_compliant:
            click.echo("\nNon-compliant rules:")
            for status in report.non_compliant:
                click.echo(click.style(f"  {status.rule_id:20s} ", fg="red")
                           + report.titles.get(status.rule_id, ""))
        if output:
            reporter.generate(report, fmt, output)
            click.echo(f"\nReport saved: {output}")

    ctx.exit(0 if not report.non_compliant else 1)


@cli.command()
@click.option("-t", "--tag", help="Only list rules with this tag")
@click.pass_context
def rules(ctx: click.Context, tag: str | None) -> None:
    """List loaded rules."""
    checker = _make_checker(ctx)
    rule_list = [r for r in checker.rules if tag is None or tag in r.tags]

    click.echo(f"Loaded rules: {len(rule_list)}")
    click.echo()
    for rule in rule_list:
        tags = ",".join(rule.tags)
        click.echo(f"  {rule.rule_id:20s} " + click.style(f"[{tags:10s}]", fg="cyan")
                   + f" {rule.title}")


@cli.command()
@click.argument("rule_id")
@click.pass_context
def show(ctx: click.Context, rule_id: str) -> None:
    """Show a rule's checks and remediation settings."""
    checker = _make_checker(ctx)
    rule = _get_rule_or_exit(checker, rule_id)

    click.echo(click.style(f"{rule.rule_id}: {rule.title}", bold=True))
    if rule.description:
        click.echo(rule.description)
    click.echo(f"Source:             {rule.source or '(programmatic)'}")
    click.echo(f"Tags:               {', '.join(rule.tags) or '-'}")
    click.echo(f"Requires root:      {'yes' if rule.requires_privilege else 'no'}")
    click.echo(f"Requires reboot:    {'yes' if rule.requires_reboot else 'no'}")
    if rule.reload:
        click.echo(f"Reload after fix:   {rule.reload.describe()}")
    click.echo("Checks:")
    for check in rule.checks:
        click.echo(f"  - [{check.check_type}] {check.describe()}")
    if rule.note:
        click.echo(f"Note: {rule.note}")


def _display_score(score: float) -> None:
    """Display compliance score with color."""
    if score >= 80:
        color = "green"
    elif score >= 60:
        color = "yellow"
    else:
        color = "red"
    click.echo(click.style(f"\nCompliance Score: {score}%", fg=color, bold=True))


if __name__ == "__main__":
    cli()
