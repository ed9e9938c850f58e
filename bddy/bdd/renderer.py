from __future__ import annotations

import re
from pathlib import Path
from typing import Callable, List, Optional

from .feature import Feature
from .models import Statusable
from .scenario import ScenarioOutline


def _tags(node: Statusable) -> str:
    return " ".join(f"@{flag.value.lower()}" for flag in node.status)


def _examples(data: list) -> List[str]:
    lines = ["    Examples:"]
    if all(isinstance(row, dict) for row in data):
        # Simple examples table (keys from all rows)
        headers = sorted({k for row in data for k in row.keys()})
        lines.append("      | " + " | ".join(headers) + " |")
        for row in data:
            lines.append("      | " + " | ".join(str(row.get(h, "")) for h in headers) + " |")
    else:
        lines.append("      | data |")
        for row in data:
            lines.append(f"      | {row} |")
    return lines


def to_gherkin(feature: Feature) -> str:
    """Render a composed feature as Gherkin text.

    Feature post-steps have no Gherkin counterpart and are listed as the
    last steps of every scenario.
    """
    lines: List[str] = []
    if feature.status:
        lines.append(_tags(feature))
    lines.append(f"Feature: {feature.description}")
    if feature.backgrounds:
        lines.append("  Background:")
        for background in feature.backgrounds:
            for step in background.steps:
                lines.append(f"    {step.keyword.value} {step.description}")
    for child in feature.children:
        lines.append("")
        if child.status:
            lines.append("  " + _tags(child))
        is_outline = isinstance(child, ScenarioOutline)
        prefix = "Scenario Outline" if is_outline else "Scenario"
        lines.append(f"  {prefix}: {child.description}")
        for step in child.steps.effective_steps(post_steps=feature.post_steps):
            tags = f"  # {_tags(step)}" if step.status else ""
            lines.append(f"    {step.keyword.value} {step.description}{tags}")
        if is_outline and child.data:
            lines.extend(_examples(child.data))
    return "\n".join(lines) + "\n"


def feature_file_name(feature: Feature) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", feature.description.lower()).strip("_")
    return (slug or "feature") + ".feature"


def write_features(
    features: List[Feature],
    out_dir: Path,
    progress_callback: Optional[Callable[[int, int, Feature], None]] = None,
) -> List[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    total = len(features)
    for idx, feat in enumerate(features, start=1):
        file_path = out_dir / feature_file_name(feat)
        file_path.write_text(to_gherkin(feat), encoding="utf-8")
        written.append(file_path)
        if progress_callback:
            progress_callback(idx, total, feat)
    return written
