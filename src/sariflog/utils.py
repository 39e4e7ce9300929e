"""Shared utilities for level filtering and result summaries."""
from __future__ import annotations

from typing import AsyncIterator, Iterator

from sariflog.models import Finding, FindingStream, OutputLevel
from sariflog.sarif import SarifLog

LEVEL_ORDER = {"none": 0, "note": 1, "warning": 2, "error": 3}


def meets_level(finding: Finding, minimum: str) -> bool:
    level = OutputLevel.parse(finding.level)
    return LEVEL_ORDER[level.value] >= LEVEL_ORDER[OutputLevel.parse(minimum).value]


async def _filter_async(findings, minimum: str) -> AsyncIterator[Finding]:
    async for finding in findings:
        if meets_level(finding, minimum):
            yield finding


def _filter_sync(findings, minimum: str) -> Iterator[Finding]:
    for finding in findings:
        if meets_level(finding, minimum):
            yield finding


def filter_findings(findings: FindingStream, minimum: str) -> FindingStream:
    """Lazily drop findings below ``minimum``, keeping the stream's sync/async kind."""

    if hasattr(findings, "__aiter__"):
        return _filter_async(findings, minimum)
    return _filter_sync(findings, minimum)


def summarize_levels(log: SarifLog) -> dict[str, int]:
    """Count results by SARIF level across all runs."""

    totals = {level: 0 for level in LEVEL_ORDER}

    for run in log.runs:
        for result in run.results:
            totals[result.level.value] += 1

    return totals
