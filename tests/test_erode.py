"""
Tests for the elementary geodesic erosion operator.
"""
from __future__ import annotations

import numpy as np
import pytest

from geoerode.erode import check_dtype, check_dtype_pair, elementary_erosion, erode_region
from geoerode.errors import InsufficientRegionError
from geoerode.region import Region

from tests.conftest import make_pair, naive_geodesic_step


class TestElementaryErosion:
    def test_1d_scenario(self):
        marker = np.array([5, 5, 1, 5, 5])
        mask = np.zeros(5, dtype=marker.dtype)
        out = elementary_erosion(marker, mask)
        np.testing.assert_array_equal(out, [5, 1, 1, 1, 5])

    def test_border_does_not_shrink(self):
        """A constant image stays constant: missing neighbours are excluded."""
        marker = np.full((6, 7), 9, dtype=np.int16)
        mask = np.zeros_like(marker)
        for fc in (False, True):
            np.testing.assert_array_equal(elementary_erosion(marker, mask, fc), marker)

    def test_mask_is_lower_bound(self):
        marker = np.array([9, 9, 9, 9, 1])
        mask = np.array([3, 4, 5, 6, 1])
        out = elementary_erosion(marker, mask)
        np.testing.assert_array_equal(out, [9, 9, 9, 6, 1])

    @pytest.mark.parametrize("fully_connected", [False, True])
    def test_matches_reference_2d(self, pair_2d, fully_connected):
        marker, mask = pair_2d
        out = elementary_erosion(marker, mask, fully_connected)
        np.testing.assert_array_equal(out, naive_geodesic_step(marker, mask, fully_connected))

    @pytest.mark.parametrize("fully_connected", [False, True])
    def test_matches_reference_3d(self, pair_3d, fully_connected):
        marker, mask = pair_3d
        out = elementary_erosion(marker, mask, fully_connected)
        np.testing.assert_array_equal(out, naive_geodesic_step(marker, mask, fully_connected))

    def test_float_values(self, pair_float):
        marker, mask = pair_float
        out = elementary_erosion(marker, mask)
        assert out.dtype == np.float32
        np.testing.assert_array_equal(out, naive_geodesic_step(marker, mask))

    @pytest.mark.parametrize("dtype", [np.uint8, np.int8, np.uint16, np.int64, np.float16, np.float64])
    def test_dtypes_preserved(self, dtype):
        marker, mask = make_pair((7, 6), dtype=dtype, seed=5, high=30)
        out = elementary_erosion(marker, mask)
        assert out.dtype == np.dtype(dtype)
        np.testing.assert_array_equal(out, naive_geodesic_step(marker, mask))

    def test_bool_images(self):
        marker = np.ones((5, 5), dtype=bool)
        marker[2, 2] = False
        mask = np.zeros_like(marker)
        out = elementary_erosion(marker, mask)
        assert out.dtype == bool
        expected = np.ones((5, 5), dtype=bool)
        expected[2, 2] = expected[1, 2] = expected[3, 2] = False
        expected[2, 1] = expected[2, 3] = False
        np.testing.assert_array_equal(out, expected)

    def test_inputs_not_modified(self, pair_2d):
        marker, mask = pair_2d
        m0, k0 = marker.copy(), mask.copy()
        elementary_erosion(marker, mask)
        np.testing.assert_array_equal(marker, m0)
        np.testing.assert_array_equal(mask, k0)


class TestConnectivity:
    def _diagonal(self):
        marker = np.zeros((7, 7), dtype=np.uint8)
        for i in range(7):
            marker[i, i] = 200
        return marker, np.zeros_like(marker)

    def test_full_connectivity_collapses_diagonal(self):
        marker, mask = self._diagonal()
        out = elementary_erosion(marker, mask, fully_connected=True)
        np.testing.assert_array_equal(out, mask)

    def test_face_connectivity_keeps_l_corner(self):
        """An L-shaped corner survives face erosion but not full erosion."""
        marker = np.zeros((5, 5), dtype=np.uint8)
        marker[0, 0] = 200
        marker[0, 1] = marker[1, 0] = 200
        mask = np.zeros_like(marker)
        face = elementary_erosion(marker, mask, fully_connected=False)
        full = elementary_erosion(marker, mask, fully_connected=True)
        assert face[0, 0] == 200
        assert full[0, 0] == 0


class TestErodeRegion:
    def test_writes_only_its_region(self, pair_2d):
        marker, mask = pair_2d
        out = np.full_like(marker, -1)
        region = Region((10, 5), (7, 9))
        erode_region(marker, mask, region, out)

        expected = naive_geodesic_step(marker, mask)
        np.testing.assert_array_equal(out[region.slices()], expected[region.slices()])
        untouched = np.ones(out.shape, dtype=bool)
        untouched[region.slices()] = False
        assert np.all(out[untouched] == -1)

    def test_out_region_buffer(self, pair_2d):
        marker, mask = pair_2d
        region = Region((30, 20), (10, 13))     # touches the bottom-right border
        out = np.empty(region.size, dtype=marker.dtype)
        erode_region(marker, mask, region, out, out_region=region)
        expected = naive_geodesic_step(marker, mask)
        np.testing.assert_array_equal(out, expected[region.slices()])

    def test_empty_region_is_noop(self, pair_2d):
        marker, mask = pair_2d
        out = np.zeros_like(marker)
        erode_region(marker, mask, Region((3, 3), (0, 4)), out)
        assert not out.any()

    @pytest.mark.parametrize("fully_connected", [False, True])
    def test_decomposition_invariance(self, pair_3d, fully_connected):
        """Arbitrary disjoint tiles with halo reads equal one whole-image pass."""
        marker, mask = pair_3d
        whole = elementary_erosion(marker, mask, fully_connected)

        tiled = np.empty_like(marker)
        for z0, z1 in ((0, 2), (2, 7), (7, 9)):
            for y0, y1 in ((0, 5), (5, 8)):
                for x0, x1 in ((0, 1), (1, 4), (4, 7)):
                    tile = Region((z0, y0, x0), (z1 - z0, y1 - y0, x1 - x0))
                    erode_region(marker, mask, tile, tiled, fully_connected=fully_connected)
        np.testing.assert_array_equal(tiled, whole)

    def test_cropped_input_buffers(self, pair_2d):
        """Marker cropped to region+halo and mask cropped to region suffice."""
        marker, mask = pair_2d
        largest = Region.from_shape(marker.shape)
        region = Region((12, 0), (9, 10))      # touches the left border
        marker_region = region.pad(1).crop(largest)
        out = np.empty(region.size, dtype=marker.dtype)
        erode_region(
            marker[marker_region.slices()].copy(), mask[region.slices()].copy(),
            region, out, out_region=region,
            marker_region=marker_region, mask_region=region, largest=largest,
        )
        expected = naive_geodesic_step(marker, mask)
        np.testing.assert_array_equal(out, expected[region.slices()])

    def test_marker_buffer_without_halo(self, pair_2d):
        marker, mask = pair_2d
        largest = Region.from_shape(marker.shape)
        region = Region((12, 4), (9, 10))
        out = np.empty(region.size, dtype=marker.dtype)
        with pytest.raises(InsufficientRegionError, match="does not cover") as info:
            erode_region(
                marker[region.slices()], mask[region.slices()], region, out,
                out_region=region, marker_region=region, mask_region=region,
                largest=largest,
            )
        assert info.value.required == region.pad(1)

    def test_mask_buffer_too_small(self, pair_2d):
        marker, mask = pair_2d
        region = Region((12, 4), (9, 10))
        mask_region = Region((12, 4), (9, 9))
        out = np.empty_like(marker)
        with pytest.raises(InsufficientRegionError, match="Mask buffer"):
            erode_region(marker, mask[mask_region.slices()], region, out,
                         mask_region=mask_region)


class TestMixedDtypes:
    def test_unsigned_marker_signed_mask(self):
        """A negative mask must not wrap around when the marker is unsigned."""
        marker = np.array([5, 5, 1, 5, 5], dtype=np.uint8)
        mask = np.full(5, -1, dtype=np.int8)
        out = elementary_erosion(marker, mask)
        assert out.dtype == np.uint8
        np.testing.assert_array_equal(out, [5, 1, 1, 1, 5])

    def test_mask_above_marker_range_is_clipped(self):
        marker = np.array([250, 250], dtype=np.uint8)
        mask = np.array([300, 0], dtype=np.int16)
        out = elementary_erosion(marker, mask)
        np.testing.assert_array_equal(out, [255, 250])

    def test_bool_marker_integer_mask(self):
        marker = np.array([True, False, True, True])
        mask = np.array([-3, 0, 0, 1], dtype=np.int8)
        out = elementary_erosion(marker, mask)
        assert out.dtype == bool
        np.testing.assert_array_equal(out, [False, False, False, True])

    def test_floating_mask_needs_floating_marker(self):
        with pytest.raises(TypeError, match="Floating mask"):
            elementary_erosion(np.ones(4, dtype=np.int32), np.zeros(4, dtype=np.float64))


class TestCheckDtype:
    @pytest.mark.parametrize("dtype", [bool, np.uint8, np.int32, np.float32])
    def test_accepts_ordered(self, dtype):
        check_dtype(dtype)

    @pytest.mark.parametrize("dtype", [np.complex64, object, "U4", "datetime64[s]"])
    def test_rejects_others(self, dtype):
        with pytest.raises(TypeError, match="Unsupported pixel type"):
            check_dtype(dtype)


class TestCheckDtypePair:
    @pytest.mark.parametrize("marker_dtype, mask_dtype", [
        (np.uint8, np.int8),
        (np.int16, np.uint8),
        (np.float32, np.int64),
        (np.float16, np.float64),
        (bool, np.uint8),
    ])
    def test_accepts(self, marker_dtype, mask_dtype):
        check_dtype_pair(marker_dtype, mask_dtype)

    @pytest.mark.parametrize("marker_dtype", [bool, np.uint8, np.int64])
    def test_rejects_floating_mask(self, marker_dtype):
        with pytest.raises(TypeError, match="Floating mask"):
            check_dtype_pair(marker_dtype, np.float32)

    def test_rejects_unordered_mask(self):
        with pytest.raises(TypeError, match="Unsupported pixel type"):
            check_dtype_pair(np.int32, np.complex64)
