import numpy as np
import pytest
from manifold3d import CrossSection, Manifold

from makerchip.models._helpers import bbox
from makerchip.models.disk import (
    center_disk,
    clamp_rounding,
    disk_profile,
    marking_shape,
    round_disk_edges,
    rounded_disk,
)

TOL = 1e-4


@pytest.mark.parametrize(
    "rounding,height,expected",
    [(1.0, 3.0, 1.0), (5.0, 3.0, 1.5), (1.5, 3.0, 1.5), (-1.0, 3.0, 0.0), (0.0, 2.0, 0.0)],
)
def test_clamp_rounding(rounding, height, expected):
    assert clamp_rounding(rounding, height) == pytest.approx(expected)


def test_profile_bounds():
    minx, miny, maxx, maxy = disk_profile(20, 1, 3).bounds()
    assert (minx, miny) == pytest.approx((0.0, 0.0), abs=TOL)
    assert (maxx, maxy) == pytest.approx((20.0, 3.0), abs=TOL)


def test_profile_without_rounding_is_rectangle():
    cs = disk_profile(20, 0, 3)
    assert cs.area() == pytest.approx(60.0, rel=1e-6)


def test_rounded_disk_bbox():
    mn, mx = bbox(rounded_disk(20, 1, 3))
    assert mn == pytest.approx([-20, -20, 0], abs=TOL)
    assert mx == pytest.approx([20, 20, 3], abs=TOL)


@pytest.mark.parametrize("rounding", [0.0, 1.5, 10.0])
def test_rounded_disk_bbox_any_rounding(rounding):
    # redondeo excesivo se recorta a height/2: el bbox no cambia
    mn, mx = bbox(rounded_disk(20, rounding, 3))
    assert mx - mn == pytest.approx([40, 40, 3], abs=TOL)


def test_round_disk_edges_trims_to_disk():
    slab = Manifold.extrude(CrossSection.circle(25, 64), 3)
    trimmed = round_disk_edges(slab, 20, 1, 3)
    mn, mx = bbox(trimmed)
    assert not trimmed.is_empty()
    assert mn == pytest.approx([-20, -20, 0], abs=1e-3)
    assert mx == pytest.approx([20, 20, 3], abs=1e-3)


def test_marking_within_disk(chip):
    marking = marking_shape("makerChipV1", chip.radius, chip.rounding_radius, chip.height)
    assert not marking.is_empty()
    mn, mx = bbox(marking)
    assert np.all(np.abs(mn[:2]) <= chip.radius + 1e-3)
    assert np.all(np.abs(mx[:2]) <= chip.radius + 1e-3)
    assert mn[2] >= -1e-6 and mx[2] <= chip.height + 1e-6


def test_center_disk():
    mn, mx = bbox(center_disk(14, 3))
    assert mn == pytest.approx([-14, -14, 0], abs=TOL)
    assert mx == pytest.approx([14, 14, 3], abs=TOL)
