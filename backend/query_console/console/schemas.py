from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, Field, StrictStr, model_validator

from query_console.console.artifact import DownloadArtifact


class QueryMode(str, Enum):
    INTERACTIVE = "interactive"
    FILE_EXPORT = "file_export"


class ConsoleState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    RENDERED = "rendered"
    DOWNLOADED = "downloaded"
    ERRORED = "errored"


class FailureKind(str, Enum):
    TRANSPORT = "transport"
    REMOTE = "remote"


@dataclass(frozen=True)
class SubmissionRequest:
    url: str
    headers: dict[str, str]
    body: dict[str, str]
    mode: QueryMode
    method: str = "POST"


class TabularResult(BaseModel):
    """Column/row result returned by the query endpoint for interactive queries."""

    columns: list[StrictStr] = Field(alias="cols")
    rows: list[list[Any]]

    @model_validator(mode="after")
    def _rows_match_columns(self) -> "TabularResult":
        width = len(self.columns)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"row {index} has {len(row)} cells, expected {width}"
                )
        return self


# ── Transport outcomes ──

@dataclass
class InteractiveSuccess:
    # Decoded JSON body, or None when a success body was not JSON.
    payload: Any


@dataclass
class FileSuccess:
    artifact: DownloadArtifact


@dataclass
class Failure:
    kind: FailureKind
    message: str | None = None


Outcome = Union[InteractiveSuccess, FileSuccess, Failure]


@dataclass
class ConsoleView:
    state: ConsoleState
    html: str = ""


class ResultAreaResponse(BaseModel):
    session_id: str
    state: ConsoleState
    html: str
