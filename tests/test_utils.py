from __future__ import annotations

import pytest

from sariflog.models import OutputLevel
from sariflog.utils import filter_findings, meets_level, summarize_levels
from sariflog.writer import SarifResultWriter
from tests.finding_factory import async_stream, make_finding, make_run

LEVELS = [OutputLevel.NONE, OutputLevel.NOTE, OutputLevel.WARNING, OutputLevel.ERROR]


def test_meets_level():
    finding = make_finding(level=OutputLevel.WARNING)

    assert meets_level(finding, "note")
    assert meets_level(finding, "warning")
    assert not meets_level(finding, "error")


def test_filter_findings_sync():
    findings = [make_finding(message=level.value, level=level) for level in LEVELS]

    kept = list(filter_findings(iter(findings), "warning"))

    assert [finding.message for finding in kept] == ["warning", "error"]


@pytest.mark.asyncio
async def test_filter_findings_async():
    findings = [make_finding(message=level.value, level=level) for level in LEVELS]

    kept = [finding async for finding in filter_findings(async_stream(findings), "note")]

    assert [finding.message for finding in kept] == ["note", "warning", "error"]


@pytest.mark.asyncio
async def test_summarize_levels_counts_all_runs():
    runs = [
        make_run([make_finding(level=OutputLevel.ERROR), make_finding()]),
        make_run([make_finding(level=OutputLevel.ERROR), make_finding(level=OutputLevel.NOTE)]),
    ]

    log = await SarifResultWriter().build_log(runs)

    assert summarize_levels(log) == {"none": 1, "note": 1, "warning": 0, "error": 2}


def test_meets_level_accepts_plain_string_levels():
    finding = make_finding(level="Error")

    assert meets_level(finding, "warning")
    assert list(filter_findings([finding], "error")) == [finding]
