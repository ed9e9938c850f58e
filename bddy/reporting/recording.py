from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional, Union

from ..bdd.models import GherkinKeyword, Severity
from .base import Message, ReportElement, Reporter, describe
from .models import Report, ReportEvent, ReportNode, ReportSummary

logger = logging.getLogger(__name__)


class RecordedElement(ReportElement):
    def __init__(self, reporter: "RecordingReporter", node: ReportNode):
        self.reporter = reporter
        self.node = node

    def _finish(self, severity: Severity, message: Message) -> None:
        self.node.severity = severity
        self.node.message = describe(message)
        if isinstance(message, BaseException):
            self.node.error_type = type(message).__name__
        self.reporter._record(self.node, severity)

    def pass_(self, description: str) -> None:
        self._finish(Severity.PASS, description)

    def fail(self, message: Message) -> None:
        self._finish(Severity.FAIL, message)

    def fatal(self, message: Message) -> None:
        self._finish(Severity.FATAL, message)

    def skip(self, message: Message) -> None:
        self._finish(Severity.SKIP, message)

    def assign_category(self, *categories: str) -> None:
        for category in categories:
            if category not in self.node.categories:
                self.node.categories.append(category)


class RecordingReporter(Reporter):
    """Keeps every reported node in memory as a tree of ReportNode.

    With a ``report_dir``, ``finish_report`` also writes the tree and a
    summary as JSON.
    """

    def __init__(
        self,
        report_dir: Optional[Union[str, Path]] = None,
        report_file: str = "report.json",
        show_status: bool = True,
    ):
        self.report_dir = Path(report_dir) if report_dir else None
        self.report_file = report_file
        self.show_status = show_status
        self.nodes: List[ReportNode] = []
        self.events: List[ReportEvent] = []
        self._feature: Optional[ReportNode] = None
        self._outline: Optional[ReportNode] = None
        self._scenario: Optional[ReportNode] = None

    def _attach(self, node: ReportNode, parent: Optional[ReportNode]) -> RecordedElement:
        if parent is None:
            self.nodes.append(node)
        else:
            parent.children.append(node)
        return RecordedElement(self, node)

    def _record(self, node: ReportNode, severity: Severity) -> None:
        self.events.append(
            ReportEvent(kind=node.kind, keyword=node.keyword, description=node.description, severity=severity, message=node.message)
        )

    def feature(self, description: str) -> ReportElement:
        node = ReportNode(kind="feature", keyword=GherkinKeyword.FEATURE.value, description=description)
        self._feature, self._outline, self._scenario = node, None, None
        return self._attach(node, None)

    def scenario(self, description: str) -> ReportElement:
        node = ReportNode(kind="scenario", keyword=GherkinKeyword.SCENARIO.value, description=description)
        self._outline, self._scenario = None, node
        return self._attach(node, self._feature)

    def scenario_outline(self, description: str) -> ReportElement:
        node = ReportNode(kind="outline", keyword="Scenario Outline", description=description)
        self._outline, self._scenario = node, None
        return self._attach(node, self._feature)

    def scenario_outline_data(self, description: str, data: Any) -> ReportElement:
        node = ReportNode(kind="example", keyword="Example", description=description, data=repr(data))
        parent = self._outline or self._feature
        self._scenario = node
        return self._attach(node, parent)

    def step(self, keyword: GherkinKeyword, description: str) -> ReportElement:
        node = ReportNode(kind="step", keyword=GherkinKeyword.parse(keyword).value, description=description)
        parent = self._scenario or self._outline or self._feature
        return self._attach(node, parent)

    # ─── Queries ───

    def all_nodes(self) -> List[ReportNode]:
        return [n for root in self.nodes for n in root.walk()]

    def find(self, kind: str, description: Optional[str] = None) -> List[ReportNode]:
        return [
            n for n in self.all_nodes()
            if n.kind == kind and (description is None or n.description == description)
        ]

    def outcomes(self, kind: Optional[str] = None) -> List[tuple]:
        """(kind, description, severity) for every terminal event, in order."""
        return [
            (e.kind, e.description, e.severity)
            for e in self.events
            if kind is None or e.kind == kind
        ]

    def summary(self) -> ReportSummary:
        summary = ReportSummary()
        for node in self.all_nodes():
            if node.severity is None:
                continue
            if node.kind == "feature":
                bucket = summary.features
            elif node.kind in {"scenario", "example"}:
                bucket = summary.scenarios
            elif node.kind == "step":
                bucket = summary.steps
            else:
                continue
            bucket[node.severity.value] = bucket.get(node.severity.value, 0) + 1
        return summary

    def finish_report(self) -> Report:
        report = Report(summary=self.summary(), nodes=self.nodes)
        if self.report_dir is not None:
            self.report_dir.mkdir(parents=True, exist_ok=True)
            path = self.report_dir / self.report_file
            path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
            logger.info("Wrote report %s", path)
        return report
