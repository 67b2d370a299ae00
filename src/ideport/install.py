"""
Install orchestration across several target IDEs.

Each target writes to its own configuration directory, so pipelines run
concurrently on a thread pool and share one ProfileLoader. A failing target
yields a failed report without affecting the others.

Two concurrent invocations targeting the same IDE in the same project are
not supported.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from ideport.models import InstallOptions, InstallReport
from ideport.profiles import ProfileLoader
from ideport.targets import TARGETS, get_target

logger = logging.getLogger(__name__)


def _resolve_names(targets: Optional[list[str]]) -> list[str]:
    names = list(targets) if targets else list(TARGETS.keys())
    return list(dict.fromkeys(names))


def install_targets(
    root: Path,
    source_dir: Path,
    targets: Optional[list[str]] = None,
    options: Optional[InstallOptions] = None,
    loader: Optional[ProfileLoader] = None,
) -> dict[str, InstallReport]:
    """Install into several targets at once.

    Returns:
        Reports keyed by target name, in the order requested.

    Raises:
        UnsupportedTargetError: If a requested target is unknown.
    """
    names = _resolve_names(targets)
    loader = loader or ProfileLoader()
    pipelines = {name: get_target(name, loader) for name in names}

    reports: dict[str, InstallReport] = {}
    with ThreadPoolExecutor(max_workers=len(pipelines) or 1) as pool:
        futures = {
            name: pool.submit(target.setup, Path(root), Path(source_dir), options)
            for name, target in pipelines.items()
        }
        for name, future in futures.items():
            try:
                reports[name] = future.result()
            except Exception as e:
                logger.exception("%s: install failed", name)
                report = InstallReport(target=name)
                report.fail(str(e))
                reports[name] = report
    return reports


def cleanup_targets(
    root: Path,
    targets: Optional[list[str]] = None,
    loader: Optional[ProfileLoader] = None,
) -> list[str]:
    """Remove managed artifacts for the given targets. Returns the names cleaned."""
    loader = loader or ProfileLoader()
    names = _resolve_names(targets)
    for name in names:
        get_target(name, loader).cleanup(Path(root))
    return names


def detect_targets(root: Path, loader: Optional[ProfileLoader] = None) -> dict[str, bool]:
    loader = loader or ProfileLoader()
    return {name: get_target(name, loader).detect(Path(root)) for name in TARGETS}
