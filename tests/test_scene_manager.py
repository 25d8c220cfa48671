"""Tests for the unified scene manager.

Tests cover:
- Unified material ids across material kinds
- Material sharing between spheres
- Validation of material references
- Kind dispatch lookups from Taichi scope
- Dictionary and JSON round trips
"""

import json
from pathlib import Path

import pytest
import taichi as ti

SCENES_DIR = Path(__file__).parent.parent / "examples" / "scenes"


def _lookup_types(material_ids):
    from src.pathtracer.scene.manager import get_material_type, get_material_type_index

    n = len(material_ids)
    ids = ti.field(dtype=ti.i32, shape=n)
    kinds = ti.field(dtype=ti.i32, shape=n)
    indices = ti.field(dtype=ti.i32, shape=n)
    for i, material_id in enumerate(material_ids):
        ids[i] = material_id

    @ti.kernel
    def test_kernel():
        for i in range(n):
            kinds[i] = get_material_type(ids[i])
            indices[i] = get_material_type_index(ids[i])

    test_kernel()
    return list(kinds.to_numpy()), list(indices.to_numpy())


class TestMaterials:
    """Tests for material registration."""

    def test_ids_are_unified_across_kinds(self):
        from src.pathtracer.scene.manager import MaterialType, SceneManager

        scene = SceneManager()
        red = scene.add_lambertian_material((0.8, 0.3, 0.3))
        gold = scene.add_metal_material((0.8, 0.6, 0.2))
        ground = scene.add_lambertian_material((0.8, 0.8, 0.0))

        assert (red, gold, ground) == (0, 1, 2)
        assert scene.get_material_count() == 3
        assert scene.get_material_type_python(gold) == MaterialType.METAL
        assert scene.get_material_info(ground).type_index == 1
        assert scene.get_material_info(gold).type_index == 0

    def test_kind_lookup_in_kernel(self):
        from src.pathtracer.scene.manager import MaterialType, SceneManager

        scene = SceneManager()
        scene.add_lambertian_material((0.8, 0.3, 0.3))
        scene.add_metal_material((0.8, 0.6, 0.2))
        scene.add_lambertian_material((0.8, 0.8, 0.0))

        kinds, indices = _lookup_types([0, 1, 2, 3, -1])

        assert kinds == [MaterialType.LAMBERTIAN, MaterialType.METAL, MaterialType.LAMBERTIAN, -1, -1]
        assert indices == [0, 0, 1, -1, -1]

    def test_unknown_material_info(self):
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        assert scene.get_material_info(0) is None
        assert scene.get_material_type_python(5) is None

    def test_invalid_albedo_rejected(self):
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError):
            scene.add_metal_material((0.5, 0.5, 1.2))
        assert scene.get_material_count() == 0


class TestSpheres:
    """Tests for sphere placement."""

    def test_spheres_share_material(self):
        from src.pathtracer.scene.intersection import sphere_material_ids
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        shared = scene.add_lambertian_material((0.5, 0.5, 0.5))
        first = scene.add_sphere((0, 0, -1), 0.5, shared)
        second = scene.add_sphere((1, 0, -1), 0.5, shared)

        assert (first, second) == (0, 1)
        assert scene.get_sphere_count() == 2
        assert scene.get_material_count() == 1
        assert sphere_material_ids[0] == sphere_material_ids[1] == shared

    def test_invalid_material_id_rejected(self):
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_material((0.5, 0.5, 0.5))

        with pytest.raises(ValueError, match="Invalid material_id"):
            scene.add_sphere((0, 0, -1), 0.5, 1)
        with pytest.raises(ValueError, match="Invalid material_id"):
            scene.add_sphere((0, 0, -1), 0.5, -1)
        assert scene.get_sphere_count() == 0

    def test_convenience_constructors(self):
        from src.pathtracer.scene.manager import MaterialType, SceneManager

        scene = SceneManager()
        sphere_a, material_a = scene.add_lambertian_sphere((0, 0, -1), 0.5, (0.8, 0.3, 0.3))
        sphere_b, material_b = scene.add_metal_sphere((1, 0, -1), 0.5, (0.8, 0.6, 0.2))

        assert (sphere_a, material_a) == (0, 0)
        assert (sphere_b, material_b) == (1, 1)
        assert scene.get_material_type_python(material_b) == MaterialType.METAL

    def test_clear(self):
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0, 0, -1), 0.5, (0.8, 0.3, 0.3))
        scene.clear()

        assert scene.get_sphere_count() == 0
        assert scene.get_material_count() == 0
        assert scene.spheres == []
        assert scene.materials == []

    def test_new_manager_starts_empty(self):
        from src.pathtracer.scene.manager import SceneManager

        SceneManager().add_lambertian_sphere((0, 0, -1), 0.5, (0.8, 0.3, 0.3))
        scene = SceneManager()

        assert scene.get_sphere_count() == 0
        assert scene.get_material_count() == 0

    def test_capacity(self):
        from src.pathtracer.scene.manager import MAX_MATERIALS, SceneManager
        from src.pathtracer.scene.intersection import MAX_SPHERES

        assert SceneManager.get_max_spheres() == MAX_SPHERES
        assert SceneManager.get_max_materials() == MAX_MATERIALS


class TestSerialization:
    """Tests for dictionary and JSON scene descriptions."""

    def _build(self):
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        red = scene.add_lambertian_material((0.8, 0.3, 0.3))
        mirror = scene.add_metal_material((0.8, 0.8, 0.8))
        scene.add_sphere((0.0, 0.0, -1.0), 0.5, red)
        scene.add_sphere((-1.0, 0.0, -1.0), 0.5, mirror)
        scene.add_sphere((1.0, 0.0, -1.0), 0.5, mirror)
        return scene

    def test_to_dict(self):
        data = self._build().to_dict()

        assert data["materials"] == [
            {"type": "lambertian", "albedo": [0.8, 0.3, 0.3]},
            {"type": "metal", "albedo": [0.8, 0.8, 0.8]},
        ]
        assert [s["material_id"] for s in data["spheres"]] == [0, 1, 1]
        assert data["spheres"][1]["center"] == [-1.0, 0.0, -1.0]

    def test_dict_round_trip(self):
        from src.pathtracer.scene.manager import SceneManager

        data = self._build().to_dict()

        restored = SceneManager()
        restored.from_dict(data)

        assert restored.get_sphere_count() == 3
        assert restored.get_material_count() == 2
        assert restored.to_dict() == data

    def test_json_file_round_trip(self, tmp_path):
        from src.pathtracer.scene.manager import load_scene_file, save_scene_file

        scene = self._build()
        path = tmp_path / "scene.json"
        save_scene_file(scene, path)

        assert json.loads(path.read_text())["materials"][1]["type"] == "metal"

        loaded = load_scene_file(path)
        assert loaded.to_dict() == scene.to_dict()

    def test_unknown_material_type(self):
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="Unknown material type"):
            scene.from_dict({"materials": [{"type": "glass", "albedo": [1, 1, 1]}]})

    def test_malformed_center(self):
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="center"):
            scene.from_dict(
                {
                    "materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}],
                    "spheres": [{"center": [0, 0], "radius": 1.0, "material_id": 0}],
                }
            )

    def test_sphere_before_material_is_rejected(self):
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="Invalid material_id"):
            scene.from_dict({"spheres": [{"center": [0, 0, -1], "radius": 0.5, "material_id": 0}]})

    @pytest.mark.parametrize(
        "bad_data",
        [
            {"materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}, {"type": "glass"}]},
            {
                "materials": [{"type": "metal", "albedo": [0.8, 0.8, 0.8]}],
                "spheres": [
                    {"center": [0, 0, -1], "radius": 0.5, "material_id": 0},
                    {"center": [0, 0, -2], "radius": 0.5, "material_id": 3},
                ],
            },
            {"materials": [{"type": "lambertian", "albedo": [0.5, float("nan"), 0.5]}]},
        ],
    )
    def test_failed_load_leaves_scene_untouched(self, bad_data):
        from src.pathtracer.scene.intersection import get_sphere_count
        from src.pathtracer.scene.manager import num_materials

        scene = self._build()
        before = scene.to_dict()

        with pytest.raises(ValueError):
            scene.from_dict(bad_data)

        assert scene.to_dict() == before
        assert get_sphere_count() == 3
        assert num_materials[None] == 2

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_albedo_rejected(self, bad):
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="outside"):
            scene.add_lambertian_material((0.5, bad, 0.5))
        with pytest.raises(ValueError, match="outside"):
            scene.add_metal_material((bad, 0.5, 0.5))
        assert scene.get_material_count() == 0

    def test_bundled_scene_file(self):
        from src.pathtracer.scene.manager import MaterialType, load_scene_file

        scene = load_scene_file(SCENES_DIR / "spheres.json")

        assert scene.get_sphere_count() == 4
        assert scene.get_material_count() == 4
        assert scene.get_material_type_python(2) == MaterialType.METAL
