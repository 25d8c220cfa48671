"""Tests for closest-hit resolution over the sphere collection.

Tests cover:
- Nearest hit regardless of insertion order
- Ties resolved in favor of the earlier sphere
- Empty scene and all-miss rays
- Sphere storage management
"""

import numpy as np
import pytest
import taichi as ti


def _intersect(origin, direction, t_min=1e-3, t_max=float("inf")):
    from src.pathtracer.core.ray import Ray, vec3
    from src.pathtracer.scene.intersection import intersect_scene

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    mat = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: ti.math.vec3, d: ti.math.vec3, lo: ti.f32, hi: ti.f32):
        record = intersect_scene(Ray(origin=o, direction=d), lo, hi)
        hit[None] = record.hit
        t_val[None] = record.t
        normal[None] = record.normal
        mat[None] = record.material_id

    test_kernel(vec3(*origin), vec3(*direction), t_min, t_max)
    n = normal[None]
    return hit[None], t_val[None], np.array([n[0], n[1], n[2]]), mat[None]


class TestSceneStorage:
    """Tests for adding and clearing spheres."""

    def test_add_sphere_returns_index(self):
        from src.pathtracer.scene.intersection import add_sphere, get_sphere_count, vec3

        assert add_sphere(vec3(0.0, 0.0, -1.0), 0.5, 0) == 0
        assert add_sphere(vec3(0.0, -100.5, -1.0), 100.0, 1) == 1
        assert get_sphere_count() == 2

    def test_sphere_data_stored(self):
        from src.pathtracer.scene.intersection import (
            add_sphere,
            sphere_centers,
            sphere_material_ids,
            sphere_radii,
            vec3,
        )

        idx = add_sphere(vec3(1.0, 2.0, 3.0), 0.25, 7)
        c = sphere_centers[idx]
        assert np.allclose([c[0], c[1], c[2]], [1.0, 2.0, 3.0])
        assert abs(sphere_radii[idx] - 0.25) < 1e-6
        assert sphere_material_ids[idx] == 7

    def test_clear_scene(self):
        from src.pathtracer.scene.intersection import (
            add_sphere,
            clear_scene,
            get_sphere_count,
            vec3,
        )

        add_sphere(vec3(0.0, 0.0, -1.0), 0.5, 0)
        clear_scene()
        assert get_sphere_count() == 0

    def test_overflow_raises(self, monkeypatch):
        from src.pathtracer.scene import intersection

        monkeypatch.setattr(intersection, "MAX_SPHERES", 2)
        intersection.add_sphere(intersection.vec3(0.0, 0.0, -1.0), 0.5, 0)
        intersection.add_sphere(intersection.vec3(0.0, 0.0, -2.0), 0.5, 0)

        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            intersection.add_sphere(intersection.vec3(0.0, 0.0, -3.0), 0.5, 0)


class TestClosestHit:
    """Tests for intersect_scene."""

    @pytest.mark.parametrize("near_first", [True, False])
    def test_nearest_hit_in_any_order(self, near_first):
        from src.pathtracer.scene.intersection import add_sphere, vec3

        near = (vec3(0.0, 0.0, -2.0), 0.5, 3)
        far = (vec3(0.0, 0.0, -5.0), 0.5, 9)
        for center, radius, material_id in ([near, far] if near_first else [far, near]):
            add_sphere(center, radius, material_id)

        hit, t, normal, material_id = _intersect((0, 0, 0), (0, 0, -1))

        assert hit == 1
        assert abs(t - 1.5) < 1e-5
        assert np.allclose(normal, [0.0, 0.0, 1.0], atol=1e-5)
        assert material_id == 3

    def test_tie_goes_to_first_sphere(self):
        """Coincident spheres: the first one added wins."""
        from src.pathtracer.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -1.0), 0.5, 4)
        add_sphere(vec3(0.0, 0.0, -1.0), 0.5, 8)

        hit, _, _, material_id = _intersect((0, 0, 0), (0, 0, -1))

        assert hit == 1
        assert material_id == 4

    def test_empty_scene_misses(self):
        hit, _, _, material_id = _intersect((0, 0, 0), (0, 0, -1))

        assert hit == 0
        assert material_id == -1

    def test_all_spheres_missed(self):
        from src.pathtracer.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -1.0), 0.5, 0)
        add_sphere(vec3(0.0, -100.5, -1.0), 100.0, 1)

        hit, _, _, _ = _intersect((0, 0, 0), (0, 1, 0))

        assert hit == 0

    def test_large_ground_sphere(self):
        from src.pathtracer.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, -100.5, -1.0), 100.0, 1)

        hit, t, normal, material_id = _intersect((0, 0, -1), (0, -1, 0))

        assert hit == 1
        assert abs(t - 0.5) < 1e-4
        assert np.allclose(normal, [0.0, 1.0, 0.0], atol=1e-5)
        assert material_id == 1

    def test_t_max_limits_search(self):
        from src.pathtracer.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -5.0), 0.5, 0)

        hit, _, _, _ = _intersect((0, 0, 0), (0, 0, -1), t_max=2.0)

        assert hit == 0

    def test_inner_sphere_seen_from_inside_outer(self):
        """A ray inside a large sphere still reports a nearer small sphere."""
        from src.pathtracer.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, 0.0), 10.0, 1)
        add_sphere(vec3(0.0, 0.0, -3.0), 0.5, 2)

        hit, t, _, material_id = _intersect((0, 0, 0), (0, 0, -1))

        assert hit == 1
        assert abs(t - 2.5) < 1e-5
        assert material_id == 2
