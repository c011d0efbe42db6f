"""Tests for backbone extraction, curve smoothing and ribbon segmentation."""

import pytest
import torch

from pdbgeom.core.ribbon import (BackboneCurveGenerator, cardinal_spline, carbon_walk_chains,
                                 extract_backbone_chains, laplacian_smooth, merge_short_runs,
                                 respace_points, segment_by_structure)
from pdbgeom.errors import ComputationCancelled
from pdbgeom.models.chain import SecondaryStructure
from pdbgeom.utils.common import CancellationToken

H = SecondaryStructure.HELIX
E = SecondaryStructure.SHEET
L = SecondaryStructure.LOOP


class TestBackboneExtraction:
    def test_helix_chain(self, parser, helix_pdb):
        model = parser.parse_string(helix_pdb).models[0]
        chains = extract_backbone_chains(model)
        assert len(chains) == 1
        assert chains[0].chain_id == "A"
        assert chains[0].residue_numbers == list(range(10, 21))
        assert chains[0].structures == [H] * 11
        assert len(chains[0]) == 11

    def test_single_residue_chain_dropped(self, parser, helix_pdb, make_atom_line):
        extra = make_atom_line(99, "CA", "GLY", "B", 1, 30.0, 0, 0, "C")
        model = parser.parse_string(helix_pdb + extra + "\n").models[0]
        assert [c.chain_id for c in extract_backbone_chains(model)] == ["A"]

    def test_calcium_is_not_backbone(self, parser, make_atom_line):
        lines = [make_atom_line(1, "CA", "GLY", "A", 1, 0, 0, 0, "C"),
                 make_atom_line(2, "CA", "GLY", "A", 2, 3.8, 0, 0, "C"),
                 make_atom_line(3, "CA", "CA", "A", 3, 7.6, 0, 0, "CA", record="HETATM")]
        model = parser.parse_string("\n".join(lines)).models[0]
        assert extract_backbone_chains(model)[0].residue_numbers == [1, 2]

    def test_residues_sorted(self, parser, make_atom_line):
        lines = [make_atom_line(1, "CA", "GLY", "A", 5, 3.8, 0, 0, "C"),
                 make_atom_line(2, "CA", "GLY", "A", 4, 0, 0, 0, "C")]
        chain = extract_backbone_chains(parser.parse_string("\n".join(lines)).models[0])[0]
        assert chain.residue_numbers == [4, 5]
        assert chain.atom_indices == [1, 0]


class TestCarbonWalk:
    def test_two_paths(self, make_model):
        model = make_model([("C", (0, 0, 0)), ("C", (1.5, 0, 0)), ("C", (3.0, 0, 0)),
                            ("C", (20, 0, 0)), ("C", (21.5, 0, 0)), ("O", (0, 1.2, 0))])
        chains = carbon_walk_chains(model)
        assert [c.atom_indices for c in chains] == [[0, 1, 2], [3, 4]]
        assert all(c.chain_id == "A" for c in chains)
        assert all(s is L for c in chains for s in c.structures)
        assert chains[0].residue_numbers == [0, 1, 2]

    def test_isolated_carbon_dropped(self, make_model):
        model = make_model([("C", (0, 0, 0)), ("C", (1.5, 0, 0)), ("C", (50, 0, 0))])
        assert [c.atom_indices for c in carbon_walk_chains(model)] == [[0, 1]]

    def test_walk_follows_nearest(self, make_model):
        model = make_model([("C", (0, 0, 0)), ("C", (2.5, 0, 0)), ("C", (1.2, 0, 0))])
        assert carbon_walk_chains(model)[0].atom_indices == [0, 2, 1]

    def test_too_few_carbons(self, make_model):
        assert carbon_walk_chains(make_model([("C", (0, 0, 0)), ("N", (1.4, 0, 0))])) == []


class TestSmoothing:
    def test_endpoints_fixed_and_input_untouched(self):
        points = torch.tensor([[0.0, 0, 0], [1.0, 2.0, 0], [2.0, 0, 0], [3.0, 2.0, 0]])
        original = points.clone()
        smoothed = laplacian_smooth(points, 3)
        assert torch.equal(points, original)
        assert torch.equal(smoothed[0], points[0])
        assert torch.equal(smoothed[-1], points[-1])
        assert smoothed[1, 1] < 2.0

    def test_single_pass_weights(self):
        points = torch.tensor([[0.0, 0, 0], [1.0, 4.0, 0], [2.0, 0, 0]])
        smoothed = laplacian_smooth(points, 1)
        assert smoothed[1].tolist() == pytest.approx([1.0, 2.0, 0.0])

    def test_straight_line_unchanged(self):
        points = torch.stack([torch.tensor([float(i), 0.0, 0.0]) for i in range(6)])
        assert torch.allclose(laplacian_smooth(points, 5), points)

    def test_respace(self):
        points = torch.tensor([[0.0, 0, 0], [1.0, 0, 0], [2.0, 0, 0]])
        spaced = respace_points(points, [L, H, E])
        assert spaced[0].tolist() == [0.0, 0.0, 0.0]
        assert spaced[1].tolist() == pytest.approx([1.2, 0.0, 0.0])
        assert spaced[2].tolist() == pytest.approx([2.1, 0.0, 0.0])


class TestCardinalSpline:
    def test_sample_count_and_control_points(self):
        points = torch.tensor([[0.0, 0, 0], [1.0, 1.0, 0], [2.0, 0, 1.0], [3.0, 1.0, 1.0]])
        curve, normals, sources = cardinal_spline(points, 0.2, 8)
        assert curve.shape == (25, 3)
        assert normals.shape == (25, 3)
        assert len(sources) == 25
        for k in range(4):
            assert torch.allclose(curve[k * 8], points[k], atol=1e-6)
        assert sources[:8] == [0] * 8
        assert sources[-1] == 3

    def test_normals_are_unit(self):
        points = torch.tensor([[0.0, 0, 0], [0.5, 1.0, 0], [1.5, 1.2, 0.5]])
        _, normals, _ = cardinal_spline(points, 0.2, 4)
        assert torch.allclose(torch.norm(normals, dim=1), torch.ones(normals.shape[0]), atol=1e-5)

    def test_tangent_parallel_to_up(self):
        points = torch.tensor([[0.0, 0, 0], [0.0, 1.0, 0], [0.0, 2.0, 0]])
        _, normals, _ = cardinal_spline(points, 0.2, 8)
        assert not torch.isnan(normals).any()
        assert torch.allclose(torch.norm(normals, dim=1), torch.ones(normals.shape[0]), atol=1e-5)

    def test_two_points(self):
        points = torch.tensor([[0.0, 0, 0], [1.0, 0, 0]])
        curve, _, sources = cardinal_spline(points, 0.2, 8)
        assert curve.shape[0] == 9
        assert sources == [0] * 8 + [1]


class TestMergeShortRuns:
    def test_short_helix_absorbed_by_loops(self):
        assert merge_short_runs([L] * 6 + [H] * 2 + [L] * 6) == [L] * 14

    def test_short_loop_absorbed_by_helices(self):
        assert merge_short_runs([H] * 6 + [L] * 2 + [H] * 6) == [H] * 14

    def test_no_longer_neighbour(self):
        structures = [H] * 3 + [L] * 3
        assert merge_short_runs(structures) == structures

    def test_non_loop_neighbour_preferred(self):
        structures = [L] * 8 + [E] * 2 + [H] * 6
        assert merge_short_runs(structures) == [L] * 8 + [H] * 8

    def test_long_runs_kept(self):
        structures = [H] * 5 + [L] * 5 + [E] * 5
        assert merge_short_runs(structures) == structures


class TestSegmentation:
    def _curve(self, count):
        points = torch.stack([torch.tensor([float(i), 0.0, 0.0]) for i in range(count)])
        normals = torch.tensor([[0.0, 0.0, 1.0]]).repeat(count, 1)
        return points, normals

    def test_transition_overlap(self):
        points, normals = self._curve(20)
        segments = segment_by_structure(points, normals, [H] * 10 + [L] * 10, list(range(20)))
        assert [s.structure for s in segments] == [H, L]
        assert len(segments[0]) == 13
        assert len(segments[1]) == 9
        assert segments[1].residue_numbers[0] == 11
        assert torch.equal(segments[0].points[-2:], segments[1].points[:2])

    def test_brief_change_absorbed(self):
        points, normals = self._curve(10)
        structures = [L] * 4 + [H] * 2 + [L] * 4
        segments = segment_by_structure(points, normals, structures, list(range(10)))
        assert len(segments) == 1
        assert segments[0].structure is L

    def test_simplified_helix(self):
        points, normals = self._curve(6)
        segments = segment_by_structure(points, normals, [H] * 6, list(range(6)))
        assert segments[0].simplified
        points, normals = self._curve(8)
        assert not segment_by_structure(points, normals, [H] * 8, list(range(8)))[0].simplified

    def test_empty(self):
        assert segment_by_structure(torch.empty(0, 3), torch.empty(0, 3), [], []) == []


class TestBackboneCurveGenerator:
    def test_helix_ribbon(self, parser, helix_pdb, logger):
        model = parser.parse_string(helix_pdb).models[0]
        segments = BackboneCurveGenerator(logger=logger).generate(model)
        assert len(segments) == 1
        segment = segments[0]
        assert segment.structure is H
        assert segment.chain_id == "A"
        assert len(segment) == 81
        assert segment.residues == list(range(10, 21))
        assert not segment.simplified
        assert torch.allclose(torch.norm(segment.normals, dim=1), torch.ones(81), atol=1e-5)

    def test_mixed_chain_segments_span_five_residues(self, parser, make_helix_line, make_sheet_line,
                                                     make_helix_ca_lines):
        # Runs H10 L1 E7 L5 E2 L5 merge into H11 E7 L12
        lines = [make_helix_line("A", 1, 10), make_sheet_line("A", 12, 18, 1), make_sheet_line("A", 24, 25, 2)]
        lines += make_helix_ca_lines("A", 1, 30)
        model = parser.parse_string("\n".join(lines + ["END"]) + "\n").models[0]
        segments = BackboneCurveGenerator().generate(model)
        assert [s.structure for s in segments] == [H, E, L]
        assert all(len(s.residues) >= 5 for s in segments)
        assert segments[0].residues[:11] == list(range(1, 12))

    def test_carbon_walk_fallback(self, make_model):
        model = make_model([("C", (0, 0, 0)), ("C", (1.5, 0, 0)), ("C", (3.0, 0.5, 0)),
                            ("C", (20, 0, 0)), ("C", (21.5, 0, 0))])
        segments = BackboneCurveGenerator().generate(model)
        assert len(segments) == 2
        assert all(s.structure is L for s in segments)
        assert [len(s) for s in segments] == [17, 9]

    def test_no_backbone(self, make_model):
        assert BackboneCurveGenerator().generate(make_model([("O", (0, 0, 0))])) == []

    def test_cancelled(self, parser, helix_pdb):
        model = parser.parse_string(helix_pdb).models[0]
        token = CancellationToken()
        token.cancel()
        with pytest.raises(ComputationCancelled):
            BackboneCurveGenerator().generate(model, token)
