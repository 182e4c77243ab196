"""report-parse CLI entrypoint."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from report_cli.sequences import Tracer
from report_cli.shared.cli import CLIContext, common_cli_options, handle_cli_errors
from report_cli.shared.config import AppConfig

from .handlers import REGISTRY
from .line_source import LineSource
from .pipeline import parse_report
from .render import records_to_jsonl, render_statistics


@click.command(help="Parse legacy fixed-column report dumps into JSON Lines.")
@click.argument("input_file", type=click.Path(path_type=str), required=True)
@click.option("--output", "output_path", type=click.Path(path_type=str), help="Write records to file.")
@click.option("--stdout", is_flag=True, help="Write records to stdout.")
@click.option(
    "--trace/--no-trace",
    "trace_flag",
    default=None,
    help="Print per-stage timing statistics to stderr (default: from config).",
)
@click.option("--encoding", type=str, help="Override the input encoding.")
@click.option("--width", type=click.IntRange(min=1), help="Split input into fixed-width records.")
@common_cli_options
@handle_cli_errors
def main(
    input_file: str,
    output_path: str | None,
    stdout: bool,
    trace_flag: bool | None,
    encoding: str | None,
    width: int | None,
    cli_ctx: CLIContext,
) -> None:
    if output_path and stdout:
        raise click.ClickException("Use either --output or --stdout, not both.")
    if not output_path and not stdout and not cli_ctx.dry_run:
        raise click.ClickException("Specify --output PATH or --stdout (or use --dry-run).")

    config = cli_ctx.config.with_source_overrides(encoding=encoding, width=width)
    tracing = config.trace.enabled if trace_flag is None else trace_flag
    cli_ctx.logger.debug(f"Reading {input_file} as {config.source.encoding}, tracing {'on' if tracing else 'off'}")

    tracer = Tracer() if tracing else None
    try:
        count = _run_parse(
            input_file=input_file,
            output_path=output_path,
            config=config,
            tracer=tracer,
            cli_ctx=cli_ctx,
        )
    finally:
        if tracer is not None:
            tracer.close()

    if cli_ctx.dry_run:
        cli_ctx.logger.info(f"[dry-run] Parsed {count} records from {input_file}; nothing written.")
    elif output_path:
        cli_ctx.logger.success(f"Wrote {count} records to {output_path}")
    else:
        cli_ctx.logger.debug(f"Wrote {count} records to stdout")

    if tracer is not None:
        render_statistics(tracer.statistics_by_path(), console=cli_ctx.logger.err_console)


def _run_parse(
    *,
    input_file: str,
    output_path: str | None,
    config: AppConfig,
    tracer: Tracer | None,
    cli_ctx: CLIContext,
) -> int:
    source = LineSource(
        input_file,
        encoding=config.source.encoding,
        skip_top_empty_lines=config.source.skip_top_empty_lines,
        width=config.source.width,
    )
    registry = REGISTRY.restricted_to(config.pipeline.enabled_reports)
    cli_ctx.logger.debug(
        "Registered reports: " + ", ".join(str(code) for code in registry.codes())
    )
    records = parse_report(
        source,
        registry=registry,
        tracer=tracer,
        lookahead_depth=config.pipeline.lookahead_depth,
        lookahead_enumerators=config.pipeline.lookahead_enumerators,
    )

    if cli_ctx.dry_run:
        return sum(1 for _ in records)
    if output_path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            return records_to_jsonl(records, handle)
    return records_to_jsonl(records, sys.stdout)


if __name__ == "__main__":  # pragma: no cover
    main()
