import json

import pytest

from rootfractal.color import RandomPalette, make_palette
from rootfractal.config import (
    DEFAULT_CONFIG,
    build_grid_config,
    build_polynomial,
    load_config,
    normalise_config,
    parse_coefficients,
)
from rootfractal.numeric.complex_number import Complex
from rootfractal.numeric.finders import MullersMethod, NewtonsMethod


def test_defaults_without_path():
    cfg = normalise_config(load_config(None))
    assert cfg["width"] == 400
    assert cfg["root_finder"] == "newton"
    grid = build_grid_config(cfg)
    assert isinstance(grid.finder, NewtonsMethod)
    assert str(grid.equation) == "x^3 - 1.0"
    assert load_config(None) is not DEFAULT_CONFIG


def test_json_config(tmp_path):
    path = tmp_path / "run.json"
    path.write_text(json.dumps({
        "coefficients": [[1, 0], [0, -1], 2],
        "root_finder": "Mueller",
        "width": 10,
        "height": 20,
        "start_x": -1,
        "end_x": 1,
        "tolerance": 1e-4,
        "max_iterations": 30,
    }), encoding="utf-8")

    cfg = normalise_config(load_config(str(path)))
    assert cfg["root_finder"] == "muller"
    grid = build_grid_config(cfg)
    assert isinstance(grid.finder, MullersMethod)
    assert (grid.width, grid.height) == (10, 20)
    assert grid.step_x == pytest.approx(0.2)
    assert grid.equation.coefficients == (Complex(1.0), Complex(0.0, -1.0), Complex(2.0))


def test_json_must_be_object(tmp_path):
    path = tmp_path / "run.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_properties_config(tmp_path):
    path = tmp_path / "cubic.properties"
    path.write_text(
        "# z^3 - 1\n"
        "order=3\n"
        "coeff.0.real=-1\n"
        "coeff.3.real=1.0\n"
        "coeff.3.imag=0\n"
        "rootFinder=mueller\n"
        "maxIterations=40\n"
        "tolerance=0.0001\n"
        "width=64\n"
        "height=32\n"
        "start_x=-1.5\n"
        "end_x=1.5\n"
        "palette=multi-gradient\n"
        "palette.colors=red, blue, green\n",
        encoding="utf-8",
    )
    cfg = normalise_config(load_config(str(path)))
    assert cfg["coefficients"] == [[-1.0, 0.0], [0.0, 0.0], [0.0, 0.0], [1.0, 0.0]]
    assert cfg["root_finder"] == "muller"
    assert cfg["max_iterations"] == 40
    assert cfg["width"] == 64 and cfg["height"] == 32
    assert cfg["start_x"] == -1.5
    assert cfg["palette"] == "multi-gradient"
    assert cfg["palette_options"] == {"colors": "red, blue, green"}
    assert build_polynomial(cfg) == build_grid_config(cfg).equation


def test_properties_requires_order(tmp_path):
    path = tmp_path / "bad.properties"
    path.write_text("rootFinder=newton\n", encoding="utf-8")
    with pytest.raises(ValueError, match="order"):
        load_config(str(path))


@pytest.mark.parametrize(
    "override",
    [
        {"width": -1},
        {"height": "tall"},
        {"tolerance": 0},
        {"max_iterations": 0},
        {"root_finder": "bisection"},
        {"coefficients": []},
        {"coefficients": [[1, 2, 3]]},
        {"coefficients": ["x"]},
    ],
)
def test_invalid_values(override):
    cfg = dict(DEFAULT_CONFIG)
    cfg.update(override)
    with pytest.raises(ValueError):
        normalise_config(cfg)


def test_missing_coefficients():
    with pytest.raises(ValueError, match="coefficients"):
        normalise_config({"width": 10})


def test_parse_coefficients():
    assert parse_coefficients([1, [2, -3]]) == [Complex(1.0), Complex(2.0, -3.0)]


def test_properties_random_palette_seed(tmp_path):
    path = tmp_path / "seeded.properties"
    path.write_text("order=2\ncoeff.0.real=-1\ncoeff.2.real=1\npalette=random\npalette.seed=7\n", encoding="utf-8")
    cfg = normalise_config(load_config(str(path)))
    assert cfg["palette_options"] == {"seed": "7"}

    first = make_palette(cfg["palette"], cfg["palette_options"], cfg["max_iterations"])
    again = make_palette("random", {"seed": 7}, cfg["max_iterations"])
    assert isinstance(first, RandomPalette)
    assert first.color(3) == again.color(3)


@pytest.mark.parametrize("order, size", [(0, 1), (1, 2)])
def test_properties_low_orders(tmp_path, order, size):
    path = tmp_path / "low.properties"
    path.write_text(f"order={order}\ncoeff.0.real=4\ncoeff.1.real=2\n", encoding="utf-8")
    poly = build_polynomial(normalise_config(load_config(str(path))))
    assert poly.order == order
    assert len(poly.coefficients) == size


def test_properties_negative_order(tmp_path):
    path = tmp_path / "neg.properties"
    path.write_text("order=-1\n", encoding="utf-8")
    with pytest.raises(ValueError, match="order"):
        load_config(str(path))
