import pytest
from manifold3d import CrossSection

from makerchip.errors import ConfigurationError, UnknownPatternError
from makerchip.models._helpers import cs_size, scale_to_size_and_center
from makerchip.models.patterns import (
    PATTERN_IDS,
    PatternResolver,
    available_patterns,
    build_registry,
    parse_svg_to_cross_section,
)


@pytest.fixture(scope="module")
def resolver():
    return PatternResolver()


def test_twenty_patterns_in_order():
    assert len(PATTERN_IDS) == 20
    assert list(PATTERN_IDS) == [f"makerChipV{i}" for i in range(1, 21)]
    assert available_patterns() == list(PATTERN_IDS)


def test_registry_is_read_only():
    registry = build_registry()
    with pytest.raises(TypeError):
        registry["makerChipV99"] = "<svg/>"


def test_unknown_pattern_lists_available(resolver):
    with pytest.raises(UnknownPatternError) as exc:
        resolver.resolve("makerChipV99")
    err = exc.value
    assert err.name == "makerChipV99"
    assert isinstance(err, ConfigurationError)
    assert isinstance(err, KeyError)
    msg = str(err)
    assert msg.startswith("Unknown shape: makerChipV99. Available shapes: ")
    for name in PATTERN_IDS:
        assert name in msg


def test_contains(resolver):
    assert "makerChipV7" in resolver
    assert "nope" not in resolver


@pytest.mark.parametrize("name", PATTERN_IDS)
def test_every_pattern_resolves(resolver, name):
    cs = resolver.resolve(name)
    assert not cs.is_empty()
    assert cs.area() > 0


@pytest.mark.parametrize("name", ["makerChipV1", "makerChipV6", "makerChipV8", "makerChipV19"])
def test_pattern_scales_onto_disk(resolver, name):
    sized = scale_to_size_and_center(resolver.resolve(name), 40.0, 40.0)
    minx, miny, maxx, maxy = sized.bounds()
    assert (minx, miny, maxx, maxy) == pytest.approx((-20, -20, 20, 20), abs=0.05)


def test_custom_registry():
    svg = '<svg xmlns="http://www.w3.org/2000/svg"><rect x="0" y="0" width="4" height="2"/></svg>'
    r = PatternResolver({"box": svg})
    assert r.names() == ["box"]
    assert cs_size(r.resolve("box")) == pytest.approx((4.0, 2.0))


def test_svg_y_axis_is_flipped():
    svg = '<svg xmlns="http://www.w3.org/2000/svg"><rect x="0" y="10" width="4" height="2"/></svg>'
    minx, miny, maxx, maxy = parse_svg_to_cross_section(svg).bounds()
    assert (miny, maxy) == pytest.approx((-12.0, -10.0))


def test_evenodd_ring_has_hole():
    svg = (
        '<svg xmlns="http://www.w3.org/2000/svg">'
        '<rect x="0" y="0" width="10" height="10"/><rect x="2" y="2" width="6" height="6"/></svg>'
    )
    assert parse_svg_to_cross_section(svg).area() == pytest.approx(100.0 - 36.0)


def test_scale_to_size_and_center_fits_and_centers():
    cs = CrossSection.square((10.0, 5.0)).translate((7.0, -3.0))
    out = scale_to_size_and_center(cs, 20.0, 20.0)
    assert out.bounds() == pytest.approx((-10.0, -5.0, 10.0, 5.0))


def test_scale_to_size_and_center_empty_is_noop():
    out = scale_to_size_and_center(CrossSection(), 20.0, 20.0)
    assert out.is_empty()
