"""Command-line interface for sariflog."""

import dataclasses

import click

from sariflog import __version__, io_utils
from sariflog.utils import LEVEL_ORDER, filter_findings, summarize_levels
from sariflog.writer import write_sarif


@click.group()
@click.version_option(version=__version__)
@click.pass_context
def main(ctx):
    """Turn analyzer findings into SARIF logs for editors and CI dashboards."""
    ctx.ensure_object(dict)


def _common_options(func):
    func = click.argument("paths", nargs=-1, required=True)(func)
    func = click.option(
        "--output",
        "-o",
        type=click.Path(),
        default=None,
        show_default="stdout",
        help="Output file path or '-' for stdout.",
    )(func)
    func = click.option(
        "--verbose",
        "-v",
        is_flag=True,
        help="Show progress and a summary of results.",
    )(func)
    func = click.option(
        "--fail-on-findings",
        "-f",
        is_flag=True,
        help="Exit with status 1 if warning or error results are present.",
    )(func)
    func = click.option(
        "--level",
        type=click.Choice(list(LEVEL_ORDER), case_sensitive=False),
        default="none",
        show_default=True,
        help="Minimum finding level to include in the output.",
    )(func)
    return func


def _tool_runs(inputs, level: str):
    for source in inputs:
        run = io_utils.read_tool_run(source)
        yield dataclasses.replace(run, results=filter_findings(run.results, level))


@main.command()
@_common_options
@click.option(
    "--compact",
    is_flag=True,
    help="Write the SARIF log without indentation.",
)
def convert(paths, output, verbose, fail_on_findings, level, compact):
    """Convert JSON Lines tool runs into a single SARIF log.

    Each input holds one tool run: a header line with the tool name, version and
    informationUri, followed by one finding per line.
    """

    inputs = io_utils.resolve_inputs(paths, mode="r")
    output_handle, should_close = io_utils.resolve_output_handle(output, mode="wb")

    try:
        if verbose:
            click.echo(f"Converting {len(inputs)} tool run(s)...", err=True)
            for source in inputs:
                click.echo(f"  - {source.display_name}", err=True)

        log = write_sarif(
            _tool_runs(inputs, level.lower()),
            output_handle,
            indent=None if compact else 2,
        )
        summary = summarize_levels(log)

        if verbose:
            click.echo(
                "Summary: "
                f"none={summary['none']} note={summary['note']} "
                f"warning={summary['warning']} error={summary['error']}",
                err=True,
            )

        if fail_on_findings and (summary["warning"] or summary["error"]):
            raise SystemExit(1)
    finally:
        if should_close:
            output_handle.close()
        io_utils.close_inputs(inputs)


if __name__ == "__main__":
    main()
