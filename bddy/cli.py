from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .bdd.feature import Feature
from .bdd.renderer import write_features
from .bdd.scenario import ScenarioOutline
from .config import BddySettings
from .errors import BddyError, StepError, StepException
from .parsing.discovery import FeatureModule, discover_features
from .reporting.console import ConsoleReporter


app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console()


def _load_config(log_level: Optional[str] = None) -> BddySettings:
    load_dotenv(override=False)
    config = BddySettings()
    if log_level:
        config.log_level = log_level
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    return config


def _discover(path: str, cfg: BddySettings) -> List[FeatureModule]:
    root = Path(path).resolve()
    if not root.exists():
        raise typer.BadParameter(f"Path not found: {root}")
    try:
        return discover_features(root, cfg.feature_globs, cfg.ignore_globs)
    except BddyError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)


def _all_features(modules: List[FeatureModule]) -> List[Feature]:
    return [feat for module in modules for feat in module.features]


@app.command()
def run(
    path: str = typer.Argument(".", help="Feature module or directory to search for feature modules"),
    report_dir: Optional[str] = typer.Option(None, help="Directory for the JSON report (default: BDDY_REPORT_DIR)"),
    show_status: Optional[bool] = typer.Option(None, "--show-status/--no-show-status", help="Report status flags as categories"),
    log_level: Optional[str] = typer.Option(None, help="Log level (default: BDDY_LOG_LEVEL)"),
    verbose: bool = typer.Option(False, help="Print the message of every failed or pending node"),
    quiet: bool = typer.Option(False, help="Print only the summary, not every node"),
):
    """Run every feature defined in the discovered feature modules."""
    cfg = _load_config(log_level)
    if report_dir is not None:
        cfg.report_dir = report_dir
    if show_status is not None:
        cfg.show_status = show_status

    features = _all_features(_discover(path, cfg))
    if not features:
        console.print("[yellow]No features found[/yellow]")
        raise typer.Exit(code=0)

    reporter = ConsoleReporter(
        console=console,
        verbose=verbose,
        quiet=quiet,
        show_status=cfg.show_status,
        report_dir=cfg.report_dir,
        report_file=cfg.report_file,
    )
    failed: List[str] = []
    for feat in features:
        if feat.reporter is None:
            feat.reporter = reporter
        try:
            feat.test()
        except (StepException, StepError):
            failed.append(feat.description)

    reporter.finish_report()
    console.print(f"[green]Wrote[/green] {Path(cfg.report_dir) / cfg.report_file}")
    if failed:
        console.print("\nFailed features:")
        for description in failed:
            console.print(f"  - {description}")
        raise typer.Exit(code=1)


@app.command(name="list")
def list_features(
    path: str = typer.Argument(".", help="Feature module or directory to search for feature modules"),
):
    """List discovered features with their scenarios and outlines."""
    cfg = _load_config()
    modules = _discover(path, cfg)

    table = Table(title="Features")
    table.add_column("Feature")
    table.add_column("Scenario")
    table.add_column("Kind")
    table.add_column("Steps")
    table.add_column("Data")
    table.add_column("Status")
    for module in modules:
        for feat in module.features:
            for child in feat.children:
                is_outline = isinstance(child, ScenarioOutline)
                table.add_row(
                    feat.description,
                    child.description,
                    "outline" if is_outline else "scenario",
                    str(len(child.steps.effective_steps(feat.backgrounds, feat.post_steps))),
                    str(len(child.data)) if is_outline else "",
                    ", ".join(feat.categories + child.categories),
                )
    console.print(table)


@app.command()
def export(
    path: str = typer.Argument(".", help="Feature module or directory to search for feature modules"),
    out_dir: str = typer.Option("features", help="Directory to write .feature files"),
):
    """Write discovered features as Gherkin .feature files."""
    cfg = _load_config()
    features = _all_features(_discover(path, cfg))
    if not features:
        console.print("[yellow]No features found[/yellow]")
        raise typer.Exit(code=0)

    out_path = Path(out_dir).resolve()

    def _feat_progress(i, total, feat):
        pct = int(i * 100 / max(1, total))
        console.print(f"[green]Wrote[/green] {feat.description}  [dim]{i}/{total} ({pct}%)[/dim]")

    write_features(features, out_path, progress_callback=_feat_progress)
    console.print(f"Wrote features to {out_path}")


if __name__ == "__main__":  # pragma: no cover
    app()
