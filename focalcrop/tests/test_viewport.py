"""Tests for viewport spec parsing."""

import pytest

from focalcrop.errors import InvalidDimensions
from focalcrop.viewport import (
    ViewportSpec,
    parse_dimensions,
    parse_viewport_spec,
    parse_viewport_specs,
)


class TestViewportSpec:
    """Tests for ViewportSpec class."""

    def test_dimensions(self):
        """Test dimensions suffix."""
        spec = ViewportSpec('Mobile', 375, 667)

        assert spec.dimensions == '375x667'

    def test_rejects_non_positive(self):
        """Test zero or negative sizes are rejected."""
        with pytest.raises(InvalidDimensions):
            ViewportSpec('Broken', 0, 100)
        with pytest.raises(InvalidDimensions):
            ViewportSpec('Broken', 100, -1)

    def test_to_dict(self):
        """Test dictionary conversion."""
        spec = ViewportSpec('Tablet', 768, 1024)

        assert spec.to_dict() == {'label': 'Tablet', 'width': 768, 'height': 1024}


class TestParsing:
    """Tests for viewport parsing helpers."""

    def test_parse_labelled(self):
        """Test 'Label=WxH' parsing."""
        spec = parse_viewport_spec('Small Desktop=1280x720')

        assert spec == ViewportSpec('Small Desktop', 1280, 720)

    def test_parse_bare_dimensions(self):
        """Test bare 'WxH' gets a dimensions label."""
        spec = parse_viewport_spec('375X667')

        assert spec.label == '375x667'
        assert (spec.width, spec.height) == (375, 667)

    def test_parse_dimensions_whitespace(self):
        """Test whitespace around dimensions is tolerated."""
        assert parse_dimensions(' 10 x 20 ') == (10, 20)

    @pytest.mark.parametrize('value', ['', 'abc', '10x', 'x10', '10x10x10', 'Mobile=', '-5x10'])
    def test_parse_invalid(self, value):
        """Test malformed specs raise InvalidDimensions."""
        with pytest.raises(InvalidDimensions):
            parse_viewport_spec(value)

    def test_parse_zero_dimension(self):
        """Test a zero dimension is rejected."""
        with pytest.raises(InvalidDimensions):
            parse_viewport_spec('Mobile=0x100')

    def test_parse_many_preserves_order(self):
        """Test multiple specs keep their order."""
        specs = parse_viewport_specs(['b=2x2', 'a=1x1', 'c=3x3'])

        assert [s.label for s in specs] == ['b', 'a', 'c']
