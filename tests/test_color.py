import numpy as np
import pytest

from rootfractal.color import (
    GradientPalette,
    MultiGradientPalette,
    RandomPalette,
    gradient,
    make_palette,
    read_color,
)


@pytest.mark.parametrize(
    "value, rgb",
    [
        ("red", (255, 0, 0)),
        ("#00ff00", (0, 255, 0)),
        ("0x0000ff", (0, 0, 255)),
        (0xFFFFFF, (255, 255, 255)),
        ([1, 2, 3], (1, 2, 3)),
    ],
)
def test_read_color(value, rgb):
    assert read_color(value) == rgb


def test_read_color_unknown():
    with pytest.raises(ValueError):
        read_color("not-a-colour")


def test_gradient_end_points():
    out = gradient(np.array([0, 10, 20]), 10, (255, 0, 0), (0, 0, 255))
    assert tuple(out[0]) == (255, 0, 0)
    assert tuple(out[1]) == (0, 0, 255)
    assert tuple(out[2]) == (0, 0, 255)


@pytest.mark.parametrize("name", ["gradient", "multi-gradient", "random"])
def test_sentinels_are_black(name):
    palette = make_palette(name, None, 50)
    colors = palette.colors_for(np.array([[0, -1], [5, 50]], dtype=np.int32))
    assert colors.shape == (2, 2, 3)
    assert colors.dtype == np.uint8
    assert tuple(colors[0, 0]) == (0, 0, 0)
    assert tuple(colors[0, 1]) == (0, 0, 0)


def test_gradient_palette_max_is_end_color():
    palette = GradientPalette(50, start="red", end="blue")
    assert palette.color(50) == (0, 0, 255)
    assert palette.color(100) == (0, 0, 255)


def test_multi_gradient_buckets():
    palette = MultiGradientPalette(50)
    # 6 default colours, 5 buckets of 10: step 10 finishes the first gradient at cyan
    assert palette.bucket_size == 10
    assert palette.color(10) == (0, 255, 255)
    assert palette.color(50) == (255, 255, 0)


def test_multi_gradient_parses_color_string():
    palette = MultiGradientPalette(20, colors="red; blue")
    assert palette.colors == [(255, 0, 0), (0, 0, 255)]
    assert palette.color(20) == (0, 0, 255)


def test_random_palette_is_stable_per_count():
    palette = RandomPalette(50, seed=7)
    first = palette.colors_for(np.array([3, 4, 3]))
    assert tuple(first[0]) == tuple(first[2])
    again = palette.colors_for(np.array([4]))
    assert tuple(again[0]) == tuple(first[1])


def test_make_palette_errors():
    with pytest.raises(ValueError, match="unknown palette"):
        make_palette("sepia", None, 10)
    with pytest.raises(ValueError, match="invalid options"):
        make_palette("gradient", {"hue": 3}, 10)


def test_default_alias():
    assert isinstance(make_palette("default", {}, 10), GradientPalette)
