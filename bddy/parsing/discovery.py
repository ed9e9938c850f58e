from __future__ import annotations

import importlib.util
import logging
import re
import sys
from pathlib import Path
from types import ModuleType
from typing import List

from pathspec import PathSpec
from pydantic import BaseModel, ConfigDict, Field

from ..bdd.feature import Feature
from ..errors import BddyError

logger = logging.getLogger(__name__)


class FeatureModule(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    path: str
    module_name: str
    features: List[Feature] = Field(default_factory=list)


def _build_spec(globs: List[str]) -> PathSpec:
    return PathSpec.from_lines("gitwildmatch", globs)


def find_feature_files(root: Path, feature_globs: List[str], ignore_globs: List[str]) -> List[Path]:
    """Python files under ``root`` matching ``feature_globs`` and none of ``ignore_globs``.

    A file given as ``root`` is returned as is.
    """
    if root.is_file():
        return [root]
    include_spec = _build_spec(feature_globs)
    ignore_spec = _build_spec(ignore_globs)
    files: List[Path] = []

    for path in sorted(root.rglob("*.py")):
        rel = str(path.relative_to(root))
        if ignore_spec.match_file(rel):
            continue
        if include_spec.match_file(rel):
            files.append(path)
    return files


def _module_name(path: Path) -> str:
    return "bddy_feature_" + re.sub(r"\W", "_", "_".join(path.with_suffix("").parts[-3:]))


def load_module(path: Path) -> ModuleType:
    """Import a feature module from its file path.

    The module's directory is put on sys.path so it can import its
    neighbours.
    """
    path = path.resolve()
    parent = str(path.parent)
    if parent not in sys.path:
        sys.path.insert(0, parent)
    name = _module_name(path)
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise BddyError(f"Cannot import feature module {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(name, None)
        raise BddyError(f"Failed to import feature module {path}: {e}") from e
    return module


def collect_features(module: ModuleType) -> List[Feature]:
    """Module level Feature objects in definition order."""
    features: List[Feature] = []
    for value in vars(module).values():
        if isinstance(value, Feature) and not any(value is f for f in features):
            features.append(value)
    return features


def discover_features(root: Path, feature_globs: List[str], ignore_globs: List[str]) -> List[FeatureModule]:
    modules: List[FeatureModule] = []
    for path in find_feature_files(root, feature_globs, ignore_globs):
        module = load_module(path)
        features = collect_features(module)
        logger.debug("Found %d feature(s) in %s", len(features), path)
        if features:
            modules.append(FeatureModule(path=str(path), module_name=module.__name__, features=features))
    return modules
