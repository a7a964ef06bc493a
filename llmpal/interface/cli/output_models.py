from typing import Literal

from pydantic import BaseModel, Field

from llmpal.application.cost_accountant import CostReport


class BaseOutput(BaseModel):
    schema_version: int = 1
    command: Literal["run"]
    exit_code: int
    error: str | None = None


class RunOutput(BaseOutput):
    command: Literal["run"] = "run"
    explanation: str | None = None
    files: list[str] = Field(default_factory=list)
    trailing: str | None = None
    warnings: list[str] = Field(default_factory=list)
    usage: CostReport | None = None
    # Set when the run ended in a safety violation and the reply was dumped.
    quarantine_path: str | None = None
