"""Shared utilities for handling CLI input and output streams."""
from __future__ import annotations

import glob
import io
import json
import os
import sys
from dataclasses import dataclass
from typing import IO, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import click

from sariflog.models import Finding, OutputLevel, ToolRun

REQUIRED_FINDING_FIELDS = ("ruleId", "ruleName", "message")
OPTIONAL_TEXT_FIELDS = ("location", "fullDescription", "helpUri")


@dataclass
class InputSource:
    """Represents an input source for CLI commands."""

    path: str
    handle: IO
    is_stdin: bool = False

    @property
    def display_name(self) -> str:
        return "stdin" if self.is_stdin else self.path


InputList = List[InputSource]


def _stdin_handle(mode: str) -> IO:
    if "b" in mode:
        return sys.stdin.buffer
    return click.get_text_stream("stdin")


def _stdout_handle(mode: str) -> IO:
    if "b" in mode:
        return sys.stdout.buffer
    return click.get_text_stream("stdout")


def resolve_inputs(paths: Sequence[str], mode: str = "r") -> InputList:
    """Resolve CLI input arguments into open file handles.

    Expands glob patterns, de-duplicates resolved paths, and handles stdin markers.
    """

    resolved: InputList = []
    seen: set[str] = set()

    for raw_path in paths:
        if raw_path == "-":
            if any(source.is_stdin for source in resolved):
                continue
            resolved.append(InputSource(path="-", handle=_stdin_handle(mode), is_stdin=True))
            continue

        matches = glob.glob(raw_path)
        if not matches:
            raise click.ClickException(f"No files matched pattern: {raw_path}")

        for match in matches:
            absolute = os.path.abspath(match)
            if absolute in seen:
                continue
            seen.add(absolute)
            try:
                handle = open(absolute, mode, encoding=None if "b" in mode else "utf-8")
            except OSError as exc:  # pragma: no cover - thin wrapper
                raise click.ClickException(str(exc)) from exc
            resolved.append(InputSource(path=absolute, handle=handle))

    if not resolved:
        raise click.ClickException("No input files provided")

    resolved.sort(key=lambda source: source.path)

    return resolved


def resolve_output_handle(
    output: Optional[Union[str, IO]], mode: str = "wb"
) -> Tuple[IO, bool]:
    """Return an output handle and whether it should be closed by the caller."""

    if output is None:
        return _stdout_handle(mode), False

    if isinstance(output, io.IOBase):
        return output, False

    if isinstance(output, str):
        if output == "-":
            return _stdout_handle(mode), False
        try:
            return open(output, mode), True
        except OSError as exc:  # pragma: no cover - thin wrapper
            raise click.ClickException(str(exc)) from exc

    raise click.ClickException("Invalid output destination")


def close_inputs(inputs: Iterable[InputSource]) -> None:
    """Close any non-stdin input handles."""

    for source in inputs:
        if not source.is_stdin:
            source.handle.close()


def _numbered_records(source: InputSource) -> Iterator[Tuple[int, dict]]:
    for line_number, raw in enumerate(source.handle, start=1):
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        if not raw.strip():
            continue
        try:
            record = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise click.ClickException(
                f"{source.display_name}:{line_number}: invalid JSON ({exc.msg})"
            ) from exc
        if not isinstance(record, dict):
            raise click.ClickException(
                f"{source.display_name}:{line_number}: expected a JSON object"
            )
        yield line_number, record


def parse_finding(record: dict, *, where: str = "finding") -> Finding:
    """Build a ``Finding`` from one JSON Lines record."""

    missing = [key for key in REQUIRED_FINDING_FIELDS if not record.get(key)]
    if missing:
        raise click.ClickException(f"{where}: missing required field(s): {', '.join(missing)}")

    line = record.get("line")
    try:
        line = int(line) if line is not None else None
    except (TypeError, ValueError) as exc:
        raise click.ClickException(f"{where}: line must be an integer") from exc

    for key in OPTIONAL_TEXT_FIELDS:
        value = record.get(key)
        if value is not None and not isinstance(value, str):
            raise click.ClickException(f"{where}: {key} must be a string")

    return Finding(
        rule_id=str(record["ruleId"]),
        rule_name=str(record["ruleName"]),
        message=str(record["message"]),
        level=OutputLevel.parse(record.get("level")),
        location=record.get("location") or "",
        line=line,
        full_description=record.get("fullDescription") or None,
        help_uri=record.get("helpUri") or None,
    )


def read_tool_run(source: InputSource) -> ToolRun:
    """Read the tool header from ``source`` and return a run with lazy findings.

    The first non-blank line names the tool; every later line is one finding and
    is only parsed when the run's results are iterated.
    """

    records = _numbered_records(source)
    header = next(records, None)
    if header is None:
        raise click.ClickException(f"{source.display_name}: empty input, expected a tool header")

    _, tool = header
    if not tool.get("name"):
        raise click.ClickException(f"{source.display_name}:{header[0]}: tool header needs a name")

    def _findings() -> Iterator[Finding]:
        for line_number, record in records:
            yield parse_finding(record, where=f"{source.display_name}:{line_number}")

    return ToolRun(
        name=str(tool["name"]),
        version=str(tool.get("version") or ""),
        information_uri=tool.get("informationUri") or None,
        results=_findings(),
    )
