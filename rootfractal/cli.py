from __future__ import annotations

import argparse
import subprocess
from typing import Optional

from tqdm import tqdm

from rootfractal.color import make_palette
from rootfractal.config import build_grid_config, build_polynomial, load_config, normalise_config
from rootfractal.grid import RunStatus, seeds_for
from rootfractal.numeric.complex_number import Complex
from rootfractal.numeric.deflation import deflate
from rootfractal.numeric.finders import get_root_finder
from rootfractal.pipeline import RUNNERS, choose_runner, render_iterations, save_image, to_image
from rootfractal.util.logging_setup import configure_root_logging, get_logger, level_from_name, queued_logging
from rootfractal.util.manifest import build_manifest, write_manifest


def _git_commit() -> Optional[str]:
    try:
        r = subprocess.run(["git", "rev-parse", "HEAD"], capture_output=True, text=True, check=True)
        return r.stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        return None


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="rootfractal", description="Root-finding iteration maps of complex polynomials.")
    p.add_argument("--config", type=str, default=None, help="Path to a JSON or .properties config. If omitted, uses x^3 - 1 defaults.")
    p.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level.")
    p.add_argument("--log-file", type=str, default="", help="Log file path (rotating). Empty disables file logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("render", help="Render the iteration map to a PNG image.")
    r.add_argument("--output", type=str, default=None, help="Output PNG (defaults to config.output).")
    r.add_argument("--runner", type=str, default="auto", choices=list(RUNNERS), help="Grid runner selection.")
    r.add_argument("--workers", type=int, default=None, help="Worker processes for the pool runner.")
    r.add_argument("--band-height", type=int, default=16, help="Rows per pool work item.")
    r.add_argument("--manifest", type=str, default=None, help="Write a JSON run manifest to this path.")
    r.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")

    s = sub.add_parser("roots", help="Find all roots of the configured polynomial by deflation.")
    s.add_argument("--seed", type=float, nargs=2, metavar=("RE", "IM"), default=(1.0, 1.0),
                   help="Starting approximation; the other two seeds are offset from it.")

    return p


def _render(args, cfg, log_level: int) -> int:
    logger = get_logger()
    grid_cfg = build_grid_config(cfg)
    if grid_cfg.size == 0:
        logger.error("Nothing to render: the grid is %sx%s", grid_cfg.width, grid_cfg.height)
        return 2
    try:
        palette = make_palette(cfg["palette"], cfg["palette_options"], grid_cfg.max_iterations)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 2
    output = args.output or cfg["output"]

    logger.info("Writing %s to %s", grid_cfg.equation, output)
    with queued_logging(logger) as queue, tqdm(total=grid_cfg.size, disable=args.no_progress, unit="px") as bar:
        runner = choose_runner(runner=args.runner, config=grid_cfg, workers=args.workers,
                               band_height=args.band_height, log_queue=queue, log_level=log_level)
        try:
            grid = render_iterations(grid_cfg, runner, on_point=bar.update)
        except RuntimeError as e:
            logger.error("%s: %s", e, e.__cause__)
            return 1

    save_image(to_image(grid, palette), output)
    logger.info("Image written: %s", output)

    if args.manifest:
        manifest = build_manifest(config=cfg, grid=grid_cfg, runner_info={"name": runner.name},
                                  result={"status": grid.outcome.status.value, **grid.summary()},
                                  git_commit=_git_commit())
        write_manifest(args.manifest, manifest)
        logger.info("Run manifest written: %s", args.manifest)
    return 0 if grid.outcome.status is RunStatus.COMPLETED else 1


def _roots(args, cfg) -> int:
    logger = get_logger()
    poly = build_polynomial(cfg)
    finder = get_root_finder(cfg["root_finder"])
    x0, x1, x2 = seeds_for(Complex(*args.seed))

    result = deflate(poly, x0, x1, x2, cfg["tolerance"], cfg["max_iterations"], finder)
    print(f"f(x) = {poly}")
    for root in result.roots:
        print(f"  x = {root}    |f(x)| = {abs(poly(root)):.3e}")
    if not result.succeeded:
        logger.error("Deflation stopped after %s root(s): %s", len(result), type(result.failure).__name__)
        return 1
    return 0


def main(argv: Optional[list] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    log_level = level_from_name(args.log_level)
    log_file = args.log_file if args.log_file and args.log_file.strip() else None
    configure_root_logging(level=log_level, console=True, log_file=log_file)
    logger = get_logger()

    try:
        cfg = normalise_config(load_config(args.config))
    except (OSError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    if args.cmd == "render":
        return _render(args, cfg, log_level)
    if args.cmd == "roots":
        return _roots(args, cfg)
    raise RuntimeError("Unknown command.")


if __name__ == "__main__":
    raise SystemExit(main())
