from __future__ import annotations

import io

import click
import pytest

from sariflog.io_utils import (
    InputSource,
    close_inputs,
    parse_finding,
    read_tool_run,
    resolve_inputs,
    resolve_output_handle,
)
from sariflog.models import OutputLevel
from tests.finding_factory import TOOL_URI, finding_record, write_tool_run_file


def _source(text: str) -> InputSource:
    return InputSource(path="memory", handle=io.StringIO(text))


def test_resolve_inputs_expands_globs_and_sorts(tmp_path):
    write_tool_run_file(tmp_path, "b.jsonl", [])
    write_tool_run_file(tmp_path, "a.jsonl", [])

    inputs = resolve_inputs([str(tmp_path / "*.jsonl"), str(tmp_path / "a.jsonl")])
    try:
        assert [source.path for source in inputs] == [
            str(tmp_path / "a.jsonl"),
            str(tmp_path / "b.jsonl"),
        ]
    finally:
        close_inputs(inputs)


def test_resolve_inputs_rejects_unmatched_pattern(tmp_path):
    with pytest.raises(click.ClickException, match="No files matched"):
        resolve_inputs([str(tmp_path / "missing-*.jsonl")])


def test_resolve_output_handle_passes_through_streams():
    buffer = io.BytesIO()

    handle, should_close = resolve_output_handle(buffer)

    assert handle is buffer
    assert should_close is False


def test_read_tool_run_parses_header_and_lazy_findings():
    text = "\n".join(
        [
            '{"name": "linter", "version": "2.0", "informationUri": "%s"}' % TOOL_URI,
            "",
            '{"ruleId": "R1", "ruleName": "One", "message": "m1", "level": "Warning", '
            '"location": "a.py", "line": 3, "fullDescription": "Rule one", "helpUri": "%s"}'
            % TOOL_URI,
            "not json",
        ]
    )

    run = read_tool_run(_source(text))
    findings = iter(run.results)

    assert run.name == "linter"
    assert run.version == "2.0"
    assert run.information_uri == TOOL_URI

    first = next(findings)
    assert first.rule_id == "R1"
    assert first.level is OutputLevel.WARNING
    assert first.location == "a.py"
    assert first.line == 3
    assert first.full_description == "Rule one"
    assert first.help_uri == TOOL_URI

    with pytest.raises(click.ClickException, match="memory:4: invalid JSON"):
        next(findings)


def test_read_tool_run_requires_header():
    with pytest.raises(click.ClickException, match="empty input"):
        read_tool_run(_source("\n\n"))

    with pytest.raises(click.ClickException, match="needs a name"):
        read_tool_run(_source('{"version": "1.0"}\n'))


def test_parse_finding_defaults_optional_fields():
    finding = parse_finding(finding_record())

    assert finding.level is OutputLevel.NONE
    assert finding.location == ""
    assert finding.line is None
    assert finding.full_description is None
    assert finding.help_uri is None


def test_parse_finding_reports_missing_fields():
    with pytest.raises(click.ClickException, match="ruleName, message"):
        parse_finding({"ruleId": "R1"}, where="file:2")


def test_parse_finding_rejects_bad_line():
    with pytest.raises(click.ClickException, match="line must be an integer"):
        parse_finding(finding_record(line="three"))


@pytest.mark.parametrize("key", ["location", "fullDescription", "helpUri"])
def test_parse_finding_rejects_non_string_text_fields(key):
    with pytest.raises(click.ClickException, match=f"file:3: {key} must be a string"):
        parse_finding(finding_record(**{key: 123}), where="file:3")


def test_parse_finding_rejects_bad_location():
    with pytest.raises(click.ClickException, match="location must be a string"):
        parse_finding(finding_record(location=["a.py"]))


def test_resolve_output_handle_binary_stdout_without_deprecation():
    import sys
    import warnings

    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        handle, should_close = resolve_output_handle("-", mode="wb")

    assert handle is sys.stdout.buffer
    assert should_close is False
