from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..bdd.models import Severity


class ReportEvent(BaseModel):
    kind: str  # feature | scenario | outline | example | step
    description: str
    severity: Severity
    keyword: Optional[str] = None
    message: str = ""


class ReportNode(BaseModel):
    kind: str  # feature | scenario | outline | example | step
    description: str
    keyword: Optional[str] = None
    data: Optional[str] = None  # repr of the outline datum for examples
    severity: Optional[Severity] = None
    message: str = ""
    error_type: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    children: List["ReportNode"] = Field(default_factory=list)

    def walk(self):
        yield self
        for child in self.children:
            yield from child.walk()


class ReportSummary(BaseModel):
    features: Dict[str, int] = Field(default_factory=dict)
    scenarios: Dict[str, int] = Field(default_factory=dict)
    steps: Dict[str, int] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        for counts in (self.features, self.scenarios, self.steps):
            if counts.get(Severity.FAIL.value) or counts.get(Severity.FATAL.value):
                return False
        return True


class Report(BaseModel):
    summary: ReportSummary = Field(default_factory=ReportSummary)
    nodes: List[ReportNode] = Field(default_factory=list)
