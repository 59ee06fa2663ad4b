"""Unit tests for the axis-aligned box primitive.

Tests cover:
- FaceClass values, aliases and normals
- Slab intersection for each of the six faces
- Misses: parallel rays outside a slab, rays pointing away, rays from inside
- Tie-breaking when a ray enters through an edge
- Per-face texture coordinates
"""

import math

import pytest
import taichi as ti


def _hit_box(origin, direction, box_min, box_max):
    """Run hit_box for a single ray and return the record as a dict."""
    from src.voxeltracer.geometry.box import hit_box, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t = ti.field(dtype=ti.f32, shape=())
    point = ti.Vector.field(3, dtype=ti.f32, shape=())
    normal = ti.Vector.field(3, dtype=ti.f32, shape=())
    face = ti.field(dtype=ti.i32, shape=())
    uv = ti.Vector.field(2, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, bmin: vec3, bmax: vec3):
        rec = hit_box(o, d, bmin, bmax)
        hit[None] = rec.hit
        t[None] = rec.t
        point[None] = rec.point
        normal[None] = rec.normal
        face[None] = rec.face
        uv[None] = rec.uv

    test_kernel(vec3(*origin), vec3(*direction), vec3(*box_min), vec3(*box_max))
    return {
        "hit": int(hit[None]),
        "t": float(t[None]),
        "point": tuple(float(point[None][i]) for i in range(3)),
        "normal": tuple(float(normal[None][i]) for i in range(3)),
        "face": int(face[None]),
        "uv": (float(uv[None][0]), float(uv[None][1])),
    }


class TestFaceClass:
    """Tests for the FaceClass enumeration."""

    def test_six_distinct_faces(self):
        """Test iteration yields one member per face in value order."""
        from src.voxeltracer.geometry.box import NUM_FACES, FaceClass

        faces = list(FaceClass)
        assert len(faces) == NUM_FACES == 6
        assert [int(f) for f in faces] == [0, 1, 2, 3, 4, 5]

    def test_top_and_bottom_aliases(self):
        """Test TOP and BOTTOM alias the Y faces."""
        from src.voxeltracer.geometry.box import FaceClass

        assert FaceClass.TOP is FaceClass.POS_Y
        assert FaceClass.BOTTOM is FaceClass.NEG_Y

    def test_normals_are_outward_unit_vectors(self):
        """Test each face reports its outward normal and axis."""
        from src.voxeltracer.geometry.box import FaceClass

        assert FaceClass.POS_X.normal == (1.0, 0.0, 0.0)
        assert FaceClass.NEG_Z.normal == (0.0, 0.0, -1.0)
        for face in FaceClass:
            n = face.normal
            assert sum(c * c for c in n) == 1.0
            assert n[face.axis] != 0.0


class TestBoxHitFaces:
    """Tests for which face a ray enters through."""

    UNIT = ((-1.0, 0.0, -1.0), (1.0, 2.0, 1.0))

    def test_front_face_hit(self):
        """Test a ray down -Z hits the +Z face of a box in front of it."""
        from src.voxeltracer.geometry.box import FaceClass

        rec = _hit_box((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (-1.0, -1.0, -3.0), (1.0, 1.0, -1.0))

        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(1.0)
        assert rec["point"] == pytest.approx((0.0, 0.0, -1.0))
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0))
        assert rec["face"] == FaceClass.POS_Z

    @pytest.mark.parametrize(
        "origin, direction, face_name, t",
        [
            ((0.0, 5.0, 0.0), (0.0, -1.0, 0.0), "POS_Y", 3.0),
            ((0.0, -5.0, 0.0), (0.0, 1.0, 0.0), "NEG_Y", 5.0),
            ((5.0, 1.0, 0.0), (-1.0, 0.0, 0.0), "POS_X", 4.0),
            ((-5.0, 1.0, 0.0), (1.0, 0.0, 0.0), "NEG_X", 4.0),
            ((0.0, 1.0, 5.0), (0.0, 0.0, -1.0), "POS_Z", 4.0),
            ((0.0, 1.0, -5.0), (0.0, 0.0, 1.0), "NEG_Z", 4.0),
        ],
    )
    def test_axis_aligned_rays(self, origin, direction, face_name, t):
        """Test rays along each axis report the face they enter through."""
        from src.voxeltracer.geometry.box import FaceClass

        rec = _hit_box(origin, direction, *self.UNIT)
        face = FaceClass[face_name]

        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(t)
        assert rec["face"] == face
        assert rec["normal"] == pytest.approx(face.normal)

    def test_normal_faces_the_ray(self):
        """Test the reported normal points back against the ray."""
        d = (0.2, -0.8, -0.5)
        length = math.sqrt(sum(c * c for c in d))
        d = tuple(c / length for c in d)

        rec = _hit_box((0.0, 5.0, 2.0), d, *self.UNIT)

        assert rec["hit"] == 1
        assert sum(a * b for a, b in zip(rec["normal"], d)) < 0.0

    def test_edge_tie_prefers_x(self):
        """Test a ray entering exactly through an X/Y edge reports the X face."""
        from src.voxeltracer.geometry.box import FaceClass

        s = 1.0 / math.sqrt(2.0)
        rec = _hit_box((2.0, 2.0, 0.5), (-s, -s, 0.0), (0.0, 0.0, 0.0), (1.0, 1.0, 1.0))

        assert rec["hit"] == 1
        assert rec["face"] == FaceClass.POS_X


class TestBoxMisses:
    """Tests for rays that do not hit the box."""

    UNIT = ((0.0, 0.0, 0.0), (1.0, 1.0, 1.0))

    def test_parallel_ray_outside_slab(self):
        """Test a ray parallel to a slab and outside it misses."""
        rec = _hit_box((-5.0, 2.0, 0.5), (1.0, 0.0, 0.0), *self.UNIT)
        assert rec["hit"] == 0

    def test_parallel_ray_inside_slab_hits(self):
        """Test a ray parallel to two slabs but inside both still hits."""
        rec = _hit_box((-5.0, 0.5, 0.5), (1.0, 0.0, 0.0), *self.UNIT)
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(5.0)

    def test_ray_pointing_away(self):
        """Test a box behind the ray origin is not hit."""
        rec = _hit_box((0.5, 5.0, 0.5), (0.0, 1.0, 0.0), *self.UNIT)
        assert rec["hit"] == 0

    def test_ray_from_inside(self):
        """Test a ray starting inside the box does not hit it."""
        rec = _hit_box((0.5, 0.5, 0.5), (0.0, 0.0, 1.0), *self.UNIT)
        assert rec["hit"] == 0

    def test_ray_passing_beside(self):
        """Test a ray passing next to the box misses."""
        rec = _hit_box((2.0, 0.5, 5.0), (0.0, 0.0, -1.0), *self.UNIT)
        assert rec["hit"] == 0


class TestFaceUV:
    """Tests for per-face texture coordinates."""

    BOX = ((0.0, 0.0, 0.0), (2.0, 2.0, 2.0))

    def test_top_face_uses_x_and_z(self):
        """Test the top face maps (x, z) to (u, v)."""
        from src.voxeltracer.geometry.box import FaceClass

        rec = _hit_box((0.5, 5.0, 1.5), (0.0, -1.0, 0.0), *self.BOX)

        assert rec["face"] == FaceClass.TOP
        assert rec["uv"] == pytest.approx((0.25, 0.75))

    def test_x_face_uses_z_and_flipped_y(self):
        """Test X faces map (z, 1 - y) to (u, v)."""
        rec = _hit_box((5.0, 0.5, 1.5), (-1.0, 0.0, 0.0), *self.BOX)
        assert rec["uv"] == pytest.approx((0.75, 0.75))

    def test_z_face_uses_x_and_flipped_y(self):
        """Test Z faces map (x, 1 - y) to (u, v)."""
        rec = _hit_box((0.5, 0.5, 5.0), (0.0, 0.0, -1.0), *self.BOX)
        assert rec["uv"] == pytest.approx((0.25, 0.75))

    def test_uv_in_unit_square(self):
        """Test texture coordinates stay within [0, 1] at the corners."""
        rec = _hit_box((2.0, 2.0, 5.0), (0.0, 0.0, -1.0), *self.BOX)

        assert rec["hit"] == 1
        u, v = rec["uv"]
        assert 0.0 <= u <= 1.0
        assert 0.0 <= v <= 1.0
