"""SARIF 2.1.0 object model for the subset of the format sariflog emits."""
from __future__ import annotations

from enum import Enum
from typing import IO, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SCHEMA_URI = "https://schemastore.azurewebsites.net/schemas/json/sarif-2.1.0-rtm.5.json"
SARIF_VERSION = "2.1.0"


class FailureLevel(str, Enum):
    NONE = "none"
    NOTE = "note"
    WARNING = "warning"
    ERROR = "error"


class SarifModel(BaseModel):
    """Base model emitting the camelCase property names used by SARIF."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Message(SarifModel):
    text: str


class MultiformatMessageString(SarifModel):
    text: str


class ArtifactLocation(SarifModel):
    uri: str


class Region(SarifModel):
    start_line: int


class PhysicalLocation(SarifModel):
    artifact_location: Optional[ArtifactLocation] = None
    region: Optional[Region] = None


class Location(SarifModel):
    physical_location: PhysicalLocation


class ReportingDescriptor(SarifModel):
    id: str
    name: Optional[str] = None
    full_description: Optional[MultiformatMessageString] = None
    help_uri: Optional[str] = None


class ToolComponent(SarifModel):
    name: str
    version: Optional[str] = None
    information_uri: Optional[str] = None
    rules: List[ReportingDescriptor] = Field(default_factory=list)


class Tool(SarifModel):
    driver: ToolComponent


class Result(SarifModel):
    rule_id: str
    level: FailureLevel = FailureLevel.NONE
    message: Message
    locations: List[Location] = Field(default_factory=list)


class Run(SarifModel):
    tool: Tool
    results: List[Result] = Field(default_factory=list)


class SarifLog(SarifModel):
    schema_uri: str = Field(default=SCHEMA_URI, alias="$schema")
    version: str = SARIF_VERSION
    runs: List[Run] = Field(default_factory=list)


def dump_sarif_log(log: SarifLog, *, indent: Optional[int] = 2) -> str:
    """Serialize ``log`` to JSON with SARIF property names and no null members.

    Key order follows the model field order, so equal documents always produce
    identical text.
    """

    return log.model_dump_json(by_alias=True, exclude_none=True, indent=indent)


def load_sarif_log(source: Union[str, bytes, IO]) -> SarifLog:
    """Parse a SARIF document from text, bytes or a readable stream."""

    data = source.read() if hasattr(source, "read") else source
    return SarifLog.model_validate_json(data)
