import configparser
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from rootfractal.grid import (
    DEFAULT_END_COORD,
    DEFAULT_HEIGHT,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_START_COORD,
    DEFAULT_TOLERANCE,
    DEFAULT_WIDTH,
    SampleGridConfig,
)
from rootfractal.numeric.complex_number import Complex
from rootfractal.numeric.equation import Polynomial
from rootfractal.numeric.finders import get_root_finder

DEFAULT_CONFIG: Dict[str, Any] = {
    # x^3 - 1
    "coefficients": [-1.0, 0.0, 0.0, 1.0],
    "root_finder": "newton",
    "width": DEFAULT_WIDTH,
    "height": DEFAULT_HEIGHT,
    "start_x": DEFAULT_START_COORD,
    "end_x": DEFAULT_END_COORD,
    "start_y": DEFAULT_START_COORD,
    "end_y": DEFAULT_END_COORD,
    "tolerance": DEFAULT_TOLERANCE,
    "max_iterations": DEFAULT_MAX_ITERATIONS,
    "palette": "gradient",
    "palette_options": {},
    "output": "roots.png",
}

# .properties keys that map straight onto config fields
_PROPERTY_KEYS = {
    "rootFinder": "root_finder",
    "tolerance": "tolerance",
    "maxIterations": "max_iterations",
    "width": "width",
    "height": "height",
    "start_x": "start_x",
    "end_x": "end_x",
    "start_y": "start_y",
    "end_y": "end_y",
    "palette": "palette",
}


def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    if not config_path:
        return dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.suffix.lower() == ".properties":
        return _load_properties(path)

    with open(path, "r", encoding="utf-8") as f:
        cfg = json.load(f)
    if not isinstance(cfg, dict):
        raise ValueError("Config JSON must be an object.")
    return cfg


def _load_properties(path: Path) -> Dict[str, Any]:
    parser = configparser.ConfigParser(interpolation=None, delimiters=("=", ":"), strict=False)
    parser.optionxform = str
    with open(path, "r", encoding="utf-8") as f:
        parser.read_string("[root]\n" + f.read(), source=str(path))
    props = dict(parser["root"])

    out: Dict[str, Any] = {}
    for key, name in _PROPERTY_KEYS.items():
        if key in props:
            out[name] = props[key].strip()

    if "order" not in props:
        raise ValueError("Missing property: order")
    try:
        order = int(props["order"].strip())
    except ValueError as e:
        raise ValueError(f"Invalid property 'order': {props['order']!r}") from e
    if order < 0:
        raise ValueError(f"Invalid property 'order' {order}, must be >= 0")
    out["coefficients"] = [
        [props.get(f"coeff.{i}.real", "0").strip(), props.get(f"coeff.{i}.imag", "0").strip()]
        for i in range(order + 1)
    ]

    palette_options = {k[len("palette."):]: v.strip() for k, v in props.items() if k.startswith("palette.")}
    if palette_options:
        out["palette_options"] = palette_options
    return out


def _number(cfg: Dict[str, Any], name: str, kind):
    try:
        return kind(cfg[name])
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid config field '{name}': {cfg[name]!r}") from e


def parse_coefficients(raw: Any) -> List[Complex]:
    """Coefficients by ascending power; each a number or an ``[re, im]`` pair."""
    if not isinstance(raw, (list, tuple)) or not raw:
        raise ValueError("coefficients must be a non-empty list.")
    out: List[Complex] = []
    for i, c in enumerate(raw):
        try:
            if isinstance(c, (list, tuple)):
                if len(c) != 2:
                    raise ValueError("expected [re, im]")
                out.append(Complex(float(c[0]), float(c[1])))
            else:
                out.append(Complex(float(c), 0.0))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid coefficient {i}: {c!r}") from e
    return out


def normalise_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    if "coefficients" not in cfg:
        raise ValueError("Missing config field: coefficients")

    out = dict(DEFAULT_CONFIG)
    out.update(cfg)

    for name in ("width", "height", "max_iterations"):
        out[name] = _number(out, name, int)
    for name in ("start_x", "end_x", "start_y", "end_y", "tolerance"):
        out[name] = _number(out, name, float)

    if out["width"] < 0 or out["height"] < 0:
        raise ValueError("width/height must be >= 0.")
    if not out["tolerance"] > 0:
        raise ValueError("tolerance must be > 0.")
    if out["max_iterations"] <= 0:
        raise ValueError("max_iterations must be > 0.")

    out["coefficients"] = [[c.re, c.im] for c in parse_coefficients(out["coefficients"])]
    out["root_finder"] = get_root_finder(str(out["root_finder"])).name
    out["palette"] = str(out.get("palette") or "gradient")
    out["palette_options"] = dict(out.get("palette_options") or {})
    out["output"] = str(out.get("output") or "roots.png")
    return out


def build_polynomial(cfg: Dict[str, Any]) -> Polynomial:
    return Polynomial(parse_coefficients(cfg["coefficients"]))


def build_grid_config(cfg: Dict[str, Any]) -> SampleGridConfig:
    """Turn a normalised config dict into a validated :class:`SampleGridConfig`."""
    return SampleGridConfig(
        equation=build_polynomial(cfg),
        finder=get_root_finder(cfg["root_finder"]),
        width=cfg["width"],
        height=cfg["height"],
        start_x=cfg["start_x"],
        end_x=cfg["end_x"],
        start_y=cfg["start_y"],
        end_y=cfg["end_y"],
        tolerance=cfg["tolerance"],
        max_iterations=cfg["max_iterations"],
    )
