"""Tests for source size selection."""

import pytest

from pkggen.errors import ConfigurationError
from pkggen.size_resolver import coverage, select_best_size_set
from pkggen.size_set import SizeSet


def sizes(*tokens):
    return [SizeSet.parse(t) for t in tokens]


class TestCoverage:
    """Tests for coverage ratio."""

    def test_dominating_source(self):
        assert coverage(SizeSet(64, 64), SizeSet(48, 48)) == pytest.approx(64 / 48)

    def test_limited_by_smaller_axis(self):
        assert coverage(SizeSet(100, 50), SizeSet(50, 50)) == pytest.approx(1.0)

    def test_zero_target_axis(self):
        assert coverage(SizeSet(10, 10), SizeSet(0, 5)) == pytest.approx(2.0)


class TestSelectBestSizeSet:
    """Tests for select_best_size_set."""

    def test_smallest_covering_source(self):
        """Test the smallest source covering the target wins."""
        result = select_best_size_set(sizes('32x32', '64x64'), SizeSet(48, 48))
        assert result == SizeSet(64, 64)

    def test_no_covering_source_picks_closest(self):
        """Test the least upscaled source wins when none covers the target."""
        result = select_best_size_set(sizes('32x32', '64x64'), SizeSet(96, 96))
        assert result == SizeSet(64, 64)

    def test_exact_match(self):
        result = select_best_size_set(sizes('128x128', '48x48', '64x64'), SizeSet(48, 48))
        assert result == SizeSet(48, 48)

    def test_prefers_least_waste_over_order(self):
        result = select_best_size_set(sizes('256x256', '128x128', '64x64'), SizeSet(60, 60))
        assert result == SizeSet(64, 64)

    def test_aspect_adjusted(self):
        """Test a wide source only counts by its limiting axis."""
        result = select_best_size_set(sizes('100x50', '60x60'), SizeSet(50, 50))
        assert result == SizeSet(100, 50)

        result = select_best_size_set(sizes('200x40', '60x60'), SizeSet(50, 50))
        assert result == SizeSet(60, 60)

    def test_tie_break_area_then_order(self):
        """Test equal coverage falls back to smaller area, then first entry."""
        result = select_best_size_set(sizes('32x96', '64x32'), SizeSet(32, 32))
        assert result == SizeSet(64, 32)

        result = select_best_size_set(sizes('64x32', '32x64'), SizeSet(32, 32))
        assert result == SizeSet(64, 32)

    def test_result_is_member_and_deterministic(self):
        """Test result is always one of the sources and stable across calls."""
        sources = sizes('16x16', '24x24', '40x20', '33x70', '128x96')
        for target in sizes('1x1', '20x20', '48x48', '64x64', '500x10', '10x500'):
            first = select_best_size_set(sources, target)
            assert first in sources
            assert select_best_size_set(sources, target) == first

    def test_empty_sources(self):
        """Test empty source list is a configuration error."""
        with pytest.raises(ConfigurationError):
            select_best_size_set([], SizeSet(48, 48))
