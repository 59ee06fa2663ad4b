"""Unit tests for the color module.

Tests cover:
- Color construction and validation
- Saturating addition, subtraction and scalar multiplication
- Packing to and from 0x00RRGGBB words
- Kernel-side color arithmetic
"""

import pytest
import taichi as ti


def _as_tuple(value):
    return tuple(int(value[i]) for i in range(3))


class TestColorBasics:
    """Tests for Color construction."""

    def test_channels_stored_as_ints(self):
        """Test that channels are exposed as plain ints."""
        from src.voxeltracer.core.color import Color

        color = Color(10, 20, 30)
        assert color.as_tuple() == (10, 20, 30)
        assert all(isinstance(c, int) for c in color.as_tuple())

    def test_channel_out_of_range_raises(self):
        """Test that channels outside [0, 255] are rejected."""
        from src.voxeltracer.core.color import Color

        with pytest.raises(ValueError, match="outside"):
            Color(256, 0, 0)
        with pytest.raises(ValueError):
            Color(0, -1, 0)

    def test_black(self):
        """Test the black constructor and constant."""
        from src.voxeltracer.core.color import BLACK, Color

        assert Color.black() == BLACK
        assert BLACK.as_tuple() == (0, 0, 0)

    def test_color_is_immutable(self):
        """Test that colors cannot be modified."""
        from dataclasses import FrozenInstanceError

        from src.voxeltracer.core.color import Color

        color = Color(1, 2, 3)
        with pytest.raises(FrozenInstanceError):
            color.r = 5


class TestColorArithmetic:
    """Tests for saturating color arithmetic."""

    def test_add_saturates(self):
        """Test that addition clamps each channel at 255."""
        from src.voxeltracer.core.color import Color

        result = Color(200, 100, 50) + Color(100, 200, 10)
        assert result.as_tuple() == (255, 255, 60)

    def test_sub_saturates(self):
        """Test that subtraction clamps each channel at 0."""
        from src.voxeltracer.core.color import Color

        result = Color(10, 20, 30) - Color(20, 10, 40)
        assert result.as_tuple() == (0, 10, 0)

    def test_mul_scales_and_clamps(self):
        """Test scalar multiplication saturates at 255."""
        from src.voxeltracer.core.color import Color

        assert (Color(200, 50, 50) * 2.0).as_tuple() == (255, 100, 100)
        assert (Color(200, 50, 50) * 0.5).as_tuple() == (100, 25, 25)

    def test_mul_truncates(self):
        """Test that fractional products are truncated toward zero."""
        from src.voxeltracer.core.color import Color

        assert (Color(3, 3, 3) * 0.5).as_tuple() == (1, 1, 1)
        assert (Color(200, 200, 200) * 0.70710677).as_tuple() == (141, 141, 141)

    def test_mul_negative_gives_black(self):
        """Test that negative scalars produce black."""
        from src.voxeltracer.core.color import Color

        assert (Color(100, 100, 100) * -1.0).as_tuple() == (0, 0, 0)

    def test_rmul(self):
        """Test scalar * color matches color * scalar."""
        from src.voxeltracer.core.color import Color

        color = Color(100, 40, 7)
        assert 0.5 * color == color * 0.5

    def test_saturation_breaks_distributivity(self):
        """Test that clamping after each operation loses overflow."""
        from src.voxeltracer.core.color import Color

        a = Color(200, 200, 200)
        b = Color(200, 200, 200)

        assert (a * 0.5 + b * 0.5).as_tuple() == (200, 200, 200)
        assert ((a + b) * 0.5).as_tuple() == (127, 127, 127)


class TestColorPacking:
    """Tests for packing colors into 32-bit words."""

    def test_to_packed(self):
        """Test packing into 0x00RRGGBB."""
        from src.voxeltracer.core.color import Color

        assert Color(0xC8, 0x32, 0x32).to_packed_u32() == 0xC83232
        assert Color(68, 142, 228).to_packed_u32() == 0x448EE4

    def test_from_packed_ignores_top_byte(self):
        """Test unpacking discards bits above the blue-green-red bytes."""
        from src.voxeltracer.core.color import Color

        assert Color.from_packed(0xFF123456).as_tuple() == (0x12, 0x34, 0x56)


class TestKernelColorArithmetic:
    """Tests for the Taichi color functions."""

    def test_color_add_and_sub_saturate(self):
        """Test kernel addition and subtraction clamp per channel."""
        from src.voxeltracer.core.color import color_add, color_sub, ivec3

        added = ti.Vector.field(3, dtype=ti.i32, shape=())
        subtracted = ti.Vector.field(3, dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            added[None] = color_add(ivec3(200, 100, 50), ivec3(100, 200, 10))
            subtracted[None] = color_sub(ivec3(10, 20, 30), ivec3(20, 10, 40))

        test_kernel()
        assert _as_tuple(added[None]) == (255, 255, 60)
        assert _as_tuple(subtracted[None]) == (0, 10, 0)

    def test_color_scale_matches_python(self):
        """Test kernel scaling agrees with Color.__mul__."""
        from src.voxeltracer.core.color import Color, color_scale, ivec3

        result = ti.Vector.field(3, dtype=ti.i32, shape=4)
        scalars = [0.5, 2.0, -1.0, 0.70710677]

        @ti.kernel
        def test_kernel():
            result[0] = color_scale(ivec3(200, 100, 3), 0.5)
            result[1] = color_scale(ivec3(200, 100, 3), 2.0)
            result[2] = color_scale(ivec3(200, 100, 3), -1.0)
            result[3] = color_scale(ivec3(200, 100, 3), 0.70710677)

        test_kernel()
        for i, scalar in enumerate(scalars):
            expected = (Color(200, 100, 3) * scalar).as_tuple()
            assert _as_tuple(result[i]) == expected

    def test_color_pack_unpack(self):
        """Test kernel packing round trip."""
        from src.voxeltracer.core.color import color_pack, color_unpack, ivec3

        packed = ti.field(dtype=ti.i32, shape=())
        unpacked = ti.Vector.field(3, dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            packed[None] = color_pack(ivec3(68, 142, 228))
            unpacked[None] = color_unpack(0x123456)

        test_kernel()
        assert packed[None] == 0x448EE4
        assert _as_tuple(unpacked[None]) == (0x12, 0x34, 0x56)
