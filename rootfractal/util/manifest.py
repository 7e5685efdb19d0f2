import importlib.metadata as importlib_metadata
import json
import os
import platform
import sys
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from rootfractal.grid import SampleGridConfig

_PACKAGES = ("numpy", "Pillow", "tqdm")


@dataclass(frozen=True)
class RunManifest:
    started_utc: str
    config: Dict[str, Any]
    equation: str
    grid: Dict[str, Any]
    runner: Dict[str, Any]
    result: Dict[str, Any]
    python: Dict[str, Any]
    packages: Dict[str, str]
    git: Dict[str, Any]
    system: Dict[str, Any]


def _utc_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def _safe_pkg_version(name: str) -> Optional[str]:
    try:
        return importlib_metadata.version(name)
    except importlib_metadata.PackageNotFoundError:
        return None


def grid_info(config: SampleGridConfig) -> Dict[str, Any]:
    return {
        "width": config.width,
        "height": config.height,
        "start_x": config.start_x,
        "end_x": config.end_x,
        "step_x": config.step_x,
        "start_y": config.start_y,
        "end_y": config.end_y,
        "step_y": config.step_y,
        "tolerance": config.tolerance,
        "max_iterations": config.max_iterations,
        "finder": config.finder.name,
    }


def build_manifest(*, config: Dict[str, Any], grid: SampleGridConfig, runner_info: Dict[str, Any],
                   result: Dict[str, Any], git_commit: Optional[str]) -> RunManifest:
    pkgs = {}
    for name in _PACKAGES:
        v = _safe_pkg_version(name)
        if v:
            pkgs[name] = v

    return RunManifest(
        started_utc=_utc_iso(),
        config=config,
        equation=str(grid.equation),
        grid=grid_info(grid),
        runner=runner_info,
        result=result,
        python={"version": sys.version, "executable": sys.executable},
        packages=pkgs,
        git={"commit": git_commit},
        system={"platform": platform.platform(), "machine": platform.machine(), "processor": platform.processor()},
    )


def write_manifest(path: str, manifest: RunManifest) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(manifest), f, indent=2, sort_keys=True)
