"""Tests for the representation dispatcher, background tasks and JSON export."""

import json

import pytest

from pdbgeom.config import GeometryConfig
from pdbgeom.core.representations import (REPRESENTATIONS, GeometryTask, derive_geometry,
                                          get_representation)
from pdbgeom.errors import ComputationCancelled, ConfigurationError
from pdbgeom.io.writer import GeometryWriter
from pdbgeom.utils.common import CancellationToken


@pytest.fixture
def dipeptide(parser, dipeptide_pdb):
    return parser.parse_string(dipeptide_pdb, source="dipeptide.pdb")


class TestDispatcher:
    def test_known_modes(self):
        assert set(REPRESENTATIONS) == {"ball-and-stick", "space-filling", "ribbon", "surface"}

    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError, match="Unknown display mode 'cartoon'"):
            get_representation("cartoon")

    def test_ball_and_stick(self, dipeptide, logger):
        result = derive_geometry(dipeptide.models[0], "ball-and-stick", logger=logger)
        assert result.mode == "ball-and-stick"
        assert len(result.bonds) == 8
        assert result.radii[0] == pytest.approx(result.atoms[0].element.display_radius)
        assert result.segments == [] and result.blobs == [] and result.overrides == {}

    def test_space_filling(self, dipeptide):
        model = dipeptide.models[0]
        result = derive_geometry(model, "space-filling")
        assert sorted(result.overrides) == list(range(model.atom_count))
        assert result.bonds == []
        assert result.radii[1] == pytest.approx(1.6)

    def test_ribbon(self, parser, helix_pdb):
        result = derive_geometry(parser.parse_string(helix_pdb).models[0], "ribbon")
        assert len(result.segments) == 1
        assert len(result.bonds) == 0

    def test_ribbon_on_small_model_adds_plain_bonds(self, dipeptide):
        result = derive_geometry(dipeptide.models[0], "ribbon")
        assert len(result.segments) == 1
        assert len(result.bonds) > 0

    def test_surface(self, dipeptide):
        result = derive_geometry(dipeptide.models[0], "surface")
        assert [b.key for b in result.blobs] == ["A:GLY:1", "A:ASP:2"]

    def test_model_untouched(self, dipeptide):
        model = dipeptide.models[0]
        before = model.coordinates.clone()
        for mode in REPRESENTATIONS:
            derive_geometry(model, mode)
        assert (model.coordinates == before).all()

    def test_max_atoms(self, dipeptide, logger):
        result = derive_geometry(dipeptide.models[0], "ball-and-stick", GeometryConfig(max_atoms=3), logger)
        assert result.index_map == [0, 3, 6]
        assert [a.index for a in result.atoms] == [0, 1, 2]
        assert any("Subsampled model 1" in r for r in logger.records)

    def test_cancelled_before_start(self, dipeptide):
        token = CancellationToken()
        token.cancel("stop")
        with pytest.raises(ComputationCancelled, match="stop"):
            derive_geometry(dipeptide.models[0], "surface", token=token)


class TestGeometryTask:
    def test_result(self, dipeptide):
        task = GeometryTask(dipeptide.models[0], "ball-and-stick").start()
        result = task.result(timeout=60)
        assert task.done()
        assert not task.cancelled
        assert len(result.bonds) == 8

    def test_result_starts_lazily(self, dipeptide):
        task = GeometryTask(dipeptide.models[0], "surface")
        assert not task.done()
        assert len(task.result(timeout=60).blobs) == 2

    def test_cancelled_task_has_no_result(self, dipeptide):
        task = GeometryTask(dipeptide.models[0], "space-filling")
        task.cancel("user switched mode")
        task.start()
        with pytest.raises(ComputationCancelled, match="user switched mode"):
            task.result(timeout=60)
        assert task.cancelled


class TestExport:
    def test_to_dict_scale(self, dipeptide):
        result = derive_geometry(dipeptide.models[0], "ball-and-stick")
        data = result.to_dict(0.1)
        assert data["atoms"][0]["position"] == pytest.approx([-0.1458, 0.0, 0.0])
        assert data["atoms"][0]["element"] == "N"
        assert data["bonds"][0]["length"] == pytest.approx(result.bonds[0].length * 0.1)
        assert set(data["bonds"][0]) == {"atomIndexA", "atomIndexB", "length"}

    def test_ribbon_segment_dict(self, parser, helix_pdb):
        result = derive_geometry(parser.parse_string(helix_pdb).models[0], "ribbon")
        segment = result.to_dict(1.0)["ribbonSegments"][0]
        assert segment["secondaryStructure"] == "helix"
        assert len(segment["points"]) == 81
        assert segment["simplified"] is False

    def test_write_string(self, dipeptide):
        result = derive_geometry(dipeptide.models[0], "space-filling")
        payload = json.loads(GeometryWriter(scale=0.1).write_string(result, dipeptide))
        assert payload["scale"] == 0.1
        assert payload["metadata"]["atoms"] == 9
        assert set(payload["relaxedPositions"]) == {str(i) for i in range(9)}

    def test_write_file(self, dipeptide, tmp_path, logger):
        result = derive_geometry(dipeptide.models[0], "surface")
        path = tmp_path / "out" / "surface.json"
        assert GeometryWriter(logger).write_file(result, str(path), dipeptide)
        payload = json.loads(path.read_text())
        assert payload["mode"] == "surface"
        assert len(payload["surfaceBlobs"]) == 2

    def test_write_file_failure(self, dipeptide, tmp_path, logger):
        result = derive_geometry(dipeptide.models[0], "ball-and-stick")
        assert not GeometryWriter(logger).write_file(result, str(tmp_path), dipeptide)
        assert any(r.startswith("ERROR:") for r in logger.records)

    def test_reports(self, dipeptide, logger):
        writer = GeometryWriter(logger)
        writer.write_parsing_report(dipeptide)
        writer.write_atom_summary(dipeptide.models[0], 0, 3)
        writer.write_geometry_summary(derive_geometry(dipeptide.models[0], "ball-and-stick"))
        assert "INFO: === PDB File Parsing Report ===" in logger.records
        assert "INFO: Total atoms: 9" in logger.records
        assert "INFO: === Atom Information Summary (0 to 2) ===" in logger.records
        assert "INFO: Bonds: 8" in logger.records
