from __future__ import annotations

from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..bdd.models import GherkinKeyword, Severity
from .base import Message, ReportElement, Reporter
from .models import Report, ReportNode
from .recording import RecordedElement, RecordingReporter

SEVERITY_STYLES = {
    Severity.PASS: "green",
    Severity.FAIL: "red",
    Severity.FATAL: "bold red",
    Severity.SKIP: "yellow",
}

DEPTH = {"feature": 0, "scenario": 1, "outline": 1, "example": 2}


class ConsoleElement(RecordedElement):
    def __init__(self, reporter: "ConsoleReporter", node: ReportNode, depth: int):
        super().__init__(reporter, node)
        self.depth = depth

    def _finish(self, severity: Severity, message: Message) -> None:
        super()._finish(severity, message)
        self.reporter._print_outcome(self.node, self.depth)


class ConsoleReporter(RecordingReporter):
    """Prints every node as it is reported and a summary table at the end.

    With ``quiet`` only the summary table is printed.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        verbose: bool = False,
        quiet: bool = False,
        show_status: bool = True,
        report_dir: Optional[str] = None,
        report_file: str = "report.json",
    ):
        super().__init__(report_dir=report_dir, report_file=report_file, show_status=show_status)
        self.console = console or Console()
        self.verbose = verbose
        self.quiet = quiet
        self._depth = 0

    def _open(self, element: RecordedElement) -> ReportElement:
        node = element.node
        if node.kind == "step":
            depth = self._depth + 1
        else:
            depth = DEPTH.get(node.kind, 0)
            self._depth = depth
            if not self.quiet:
                label = f"{node.keyword}: {escape(node.description)}"
                if node.data is not None:
                    label += f" [dim]<{escape(node.data)}>[/dim]"
                self.console.print("  " * depth + f"[bold]{label}[/bold]")
        return ConsoleElement(self, node, depth)

    def _print_outcome(self, node: ReportNode, depth: int) -> None:
        if self.quiet:
            return
        style = SEVERITY_STYLES[node.severity]
        indent = "  " * depth
        categories = f" [dim]({', '.join(node.categories)})[/dim]" if node.categories else ""
        if node.kind == "step":
            line = f"{indent}[{style}]{node.severity.value:5s}[/{style}] {node.keyword} {escape(node.description)}{categories}"
        else:
            line = f"{indent}[{style}]→ {node.severity.value}[/{style}]{categories}"
        self.console.print(line)
        if node.severity in (Severity.FAIL, Severity.FATAL) or (self.verbose and node.error_type):
            self.console.print(f"{indent}      [dim]{escape(node.message[:200])}[/dim]")

    def feature(self, description: str) -> ReportElement:
        return self._open(super().feature(description))

    def scenario(self, description: str) -> ReportElement:
        return self._open(super().scenario(description))

    def scenario_outline(self, description: str) -> ReportElement:
        return self._open(super().scenario_outline(description))

    def scenario_outline_data(self, description: str, data: Any) -> ReportElement:
        return self._open(super().scenario_outline_data(description, data))

    def step(self, keyword: GherkinKeyword, description: str) -> ReportElement:
        return self._open(super().step(keyword, description))

    def finish_report(self) -> Report:
        report = super().finish_report()
        table = Table(title="Summary")
        table.add_column("Level")
        for severity in Severity:
            table.add_column(severity.value, style=SEVERITY_STYLES[severity])
        rows: Dict[str, Dict[str, int]] = {
            "Features": report.summary.features,
            "Scenarios": report.summary.scenarios,
            "Steps": report.summary.steps,
        }
        for label, counts in rows.items():
            table.add_row(label, *(str(counts.get(s.value, 0)) for s in Severity))
        self.console.print(table)
        return report


class CompositeElement(ReportElement):
    def __init__(self, elements: List[ReportElement]):
        self.elements = elements

    def pass_(self, description: str) -> None:
        for element in self.elements:
            element.pass_(description)

    def fail(self, message: Message) -> None:
        for element in self.elements:
            element.fail(message)

    def fatal(self, message: Message) -> None:
        for element in self.elements:
            element.fatal(message)

    def skip(self, message: Message) -> None:
        for element in self.elements:
            element.skip(message)

    def assign_category(self, *categories: str) -> None:
        for element in self.elements:
            element.assign_category(*categories)


class CompositeReporter(Reporter):
    """Sends every call to each of ``reporters``."""

    def __init__(self, *reporters: Reporter, show_status: bool = True):
        self.reporters = list(reporters)
        self.show_status = show_status

    def feature(self, description: str) -> ReportElement:
        return CompositeElement([r.feature(description) for r in self.reporters])

    def scenario(self, description: str) -> ReportElement:
        return CompositeElement([r.scenario(description) for r in self.reporters])

    def scenario_outline(self, description: str) -> ReportElement:
        return CompositeElement([r.scenario_outline(description) for r in self.reporters])

    def scenario_outline_data(self, description: str, data: Any) -> ReportElement:
        return CompositeElement([r.scenario_outline_data(description, data) for r in self.reporters])

    def step(self, keyword: GherkinKeyword, description: str) -> ReportElement:
        return CompositeElement([r.step(keyword, description) for r in self.reporters])

    def finish_report(self) -> List[Any]:
        return [r.finish_report() for r in self.reporters]
