"""Assemble streamed analyzer findings into a single SARIF log."""
from __future__ import annotations

import asyncio
import io
import logging
from typing import IO, AsyncIterable, AsyncIterator, Iterable, Optional, Union

from sariflog.models import Finding, OutputLevel, ToolRun
from sariflog.sarif import (
    ArtifactLocation,
    FailureLevel,
    Location,
    Message,
    MultiformatMessageString,
    PhysicalLocation,
    Region,
    ReportingDescriptor,
    Result,
    Run,
    SarifLog,
    Tool,
    ToolComponent,
    dump_sarif_log,
)

logger = logging.getLogger(__name__)

ToolRunStream = Union[AsyncIterable[ToolRun], Iterable[ToolRun]]

LEVEL_MAP = {
    OutputLevel.NONE: FailureLevel.NONE,
    OutputLevel.NOTE: FailureLevel.NOTE,
    OutputLevel.WARNING: FailureLevel.WARNING,
    OutputLevel.ERROR: FailureLevel.ERROR,
}


async def _iterate(items) -> AsyncIterator:
    """Yield from an async or plain iterable, one item per suspension point."""

    if hasattr(items, "__aiter__"):
        async for item in items:
            yield item
    else:
        for item in items:
            yield item


def _check_cancelled(cancel_event: Optional[asyncio.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise asyncio.CancelledError("SARIF write cancelled")


def map_level(level) -> FailureLevel:
    """Map an analyzer level onto a SARIF level; unrecognized values become ``none``."""

    return LEVEL_MAP[OutputLevel.parse(level)]


def build_locations(location: str, line: Optional[int]) -> list[Location]:
    """Return the SARIF locations for a file path and 1-based line number."""

    has_line = bool(line) and line > 0
    if not location and not has_line:
        return []

    # physicalLocation must carry an artifactLocation, even with an empty uri
    physical = PhysicalLocation(
        artifact_location=ArtifactLocation(uri=location.replace("\\", "/")),
        region=Region(start_line=line) if has_line else None,
    )
    return [Location(physical_location=physical)]


def build_rule(finding: Finding) -> ReportingDescriptor:
    return ReportingDescriptor(
        id=finding.rule_id,
        name=finding.rule_name,
        full_description=MultiformatMessageString(text=finding.description),
        help_uri=finding.help_uri,
    )


def build_result(finding: Finding) -> Result:
    return Result(
        rule_id=finding.rule_id,
        level=map_level(finding.level),
        message=Message(text=finding.message),
        locations=build_locations(finding.location, finding.line),
    )


def build_run(
    definition: ToolRun,
    rules: Iterable[ReportingDescriptor],
    results: Iterable[Result],
) -> Run:
    driver = ToolComponent(
        name=definition.name,
        version=definition.version,
        information_uri=definition.information_uri,
        rules=list(rules),
    )
    return Run(tool=Tool(driver=driver), results=list(results))


def _write_payload(output: IO, payload: str) -> None:
    if isinstance(output, io.TextIOBase):
        output.write(payload)
    else:
        output.write(payload.encode("utf-8"))
    output.flush()


class SarifResultWriter:
    """Write analyzer tool runs to a stream as one SARIF log.

    Each ``ToolRun`` becomes one SARIF run. Rules are deduplicated per run by
    rule id, keeping the metadata of the first finding that referenced them,
    and every finding becomes exactly one result. The document is serialized
    once, after every input stream has been drained, so a producer error or a
    cancellation leaves ``output`` untouched.
    """

    def __init__(self, *, indent: Optional[int] = 2):
        self.indent = indent

    async def _drain_run(
        self, definition: ToolRun, cancel_event: Optional[asyncio.Event]
    ) -> Run:
        rules: dict[str, ReportingDescriptor] = {}
        results: list[Result] = []

        async for finding in _iterate(definition.results):
            _check_cancelled(cancel_event)
            if finding.rule_id not in rules:
                rules[finding.rule_id] = build_rule(finding)
            results.append(build_result(finding))

        return build_run(definition, rules.values(), results)

    async def build_log(
        self,
        definitions: ToolRunStream,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> SarifLog:
        """Drain ``definitions`` into an in-memory ``SarifLog`` without writing it."""

        if definitions is None:
            raise ValueError("definitions must not be None")

        log = SarifLog()
        async for definition in _iterate(definitions):
            _check_cancelled(cancel_event)
            logger.debug("Draining results for %s %s", definition.name, definition.version)
            run = await self._drain_run(definition, cancel_event)
            logger.debug(
                "Finished %s: %d rule(s), %d result(s)",
                definition.name,
                len(run.tool.driver.rules),
                len(run.results),
            )
            log.runs.append(run)

        _check_cancelled(cancel_event)
        return log

    async def write(
        self,
        definitions: ToolRunStream,
        output: IO,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> SarifLog:
        """Drain ``definitions`` and write the resulting SARIF log to ``output``.

        Parameters
        ----------
        definitions:
            Tool runs, as an async or plain iterable. ``None`` raises ``ValueError``.
        output:
            Binary or text stream owned by the caller. It is flushed but never closed.
        cancel_event:
            Optional event checked between runs and findings; once set, the write
            raises ``asyncio.CancelledError`` before anything reaches ``output``.

        Returns the ``SarifLog`` that was written.
        """

        log = await self.build_log(definitions, cancel_event)
        payload = dump_sarif_log(log, indent=self.indent) + "\n"
        _write_payload(output, payload)
        logger.debug("Wrote SARIF log with %d run(s)", len(log.runs))
        return log


def write_sarif(
    definitions: ToolRunStream,
    output: IO,
    *,
    indent: Optional[int] = 2,
) -> SarifLog:
    """Synchronous wrapper around ``SarifResultWriter.write``."""

    return asyncio.run(SarifResultWriter(indent=indent).write(definitions, output))
