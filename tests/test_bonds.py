"""Tests for distance and valence based bond inference."""

import pytest

from pdbgeom.config import GeometryConfig
from pdbgeom.core.bonds import BondInferenceEngine
from pdbgeom.errors import ComputationCancelled
from pdbgeom.utils.common import CancellationToken

METHANE_PLUS = [("C", (0, 0, 0)),
                ("H", (1.1, 0, 0)), ("H", (-1.1, 0, 0)),
                ("H", (0, 1.1, 0)), ("H", (0, -1.1, 0)),
                ("H", (0, 0, 1.1)), ("H", (0, 0, -1.1))]


def _degree(bonds, index):
    return sum(1 for b in bonds if index in b.key)


class TestStrictBonds:
    def test_two_carbons(self, parser, two_carbon_pdb, logger):
        model = parser.parse_string(two_carbon_pdb).models[0]
        bonds = BondInferenceEngine(logger=logger).infer_bonds(model)
        assert len(bonds) == 1
        assert bonds[0].key == (0, 1)
        assert bonds[0].length == pytest.approx(1.4, abs=1e-4)

    def test_out_of_range(self, make_model):
        model = make_model([("C", (0, 0, 0)), ("C", (2.3, 0, 0))])
        assert BondInferenceEngine().strict_bonds(model) == []

    def test_valence_limit(self, make_model):
        model = make_model(METHANE_PLUS)
        bonds = BondInferenceEngine().strict_bonds(model)
        assert _degree(bonds, 0) == 4
        for index in range(1, 7):
            assert _degree(bonds, index) <= 1

    def test_shortest_first(self, make_model):
        model = make_model([("H", (0, 0, 0)), ("O", (1.5, 0, 0)), ("O", (-0.96, 0, 0))])
        bonds = BondInferenceEngine().strict_bonds(model)
        assert [b.key for b in bonds] == [(0, 2)]

    def test_unknown_atoms_never_bonded(self, make_model):
        model = make_model([("C", (0, 0, 0)), ("QQ", (1.0, 0, 0)), ("C", (1.5, 0, 0))])
        bonds = BondInferenceEngine().infer_bonds(model)
        assert all(1 not in b.key for b in bonds)
        assert [b.key for b in bonds] == [(0, 2)]

    def test_bond_invariants(self, parser, dipeptide_pdb):
        model = parser.parse_string(dipeptide_pdb).models[0]
        bonds = BondInferenceEngine().infer_bonds(model)
        keys = [b.key for b in bonds]
        assert len(keys) == len(set(keys))
        for bond in bonds:
            assert bond.atom1 < bond.atom2
            assert bond.length <= 2.2 + 1e-6
        for atom in model.atoms:
            assert _degree(bonds, atom.index) <= atom.element.max_bonds

    def test_deterministic(self, parser, dipeptide_pdb):
        model = parser.parse_string(dipeptide_pdb).models[0]
        engine = BondInferenceEngine()
        assert engine.infer_bonds(model) == engine.infer_bonds(model)

    def test_batch_size_does_not_change_result(self, parser, dipeptide_pdb):
        model = parser.parse_string(dipeptide_pdb).models[0]
        reference = BondInferenceEngine().infer_bonds(model)
        batched = BondInferenceEngine(GeometryConfig(batch_size=2)).infer_bonds(model)
        assert [b.key for b in batched] == [b.key for b in reference]

    def test_cancelled(self, parser, dipeptide_pdb):
        model = parser.parse_string(dipeptide_pdb).models[0]
        token = CancellationToken()
        token.cancel()
        with pytest.raises(ComputationCancelled):
            BondInferenceEngine().infer_bonds(model, token)


class TestPermissiveBonds:
    def test_unrecognized_pair_uses_generous_threshold(self, make_model):
        model = make_model([("C", (0, 0, 0)), ("P", (2.4, 0, 0))])
        bonds = BondInferenceEngine().infer_bonds(model)
        assert [b.key for b in bonds] == [(0, 1)]

    def test_recognized_pair_keeps_tight_threshold(self, make_model):
        model = make_model([("C", (0, 0, 0)), ("C", (2.4, 0, 0))])
        assert BondInferenceEngine().infer_bonds(model) == []

    def test_pair_threshold_is_symmetric(self, make_model):
        model = make_model([("O", (0, 0, 0)), ("H", (1.0, 0, 0)), ("ZN", (3.0, 0, 0))])
        engine = BondInferenceEngine()
        assert engine.pair_threshold(model, 0, 1) == engine.pair_threshold(model, 1, 0) == 2.0
        assert engine.pair_threshold(model, 0, 2) == 2.5

    def test_existing_bonds_kept(self, make_model):
        model = make_model([("C", (0, 0, 0)), ("C", (1.5, 0, 0)), ("P", (1.5, 2.4, 0))])
        engine = BondInferenceEngine()
        strict = engine.strict_bonds(model)
        assert len(strict) == 1
        extended = engine.permissive_bonds(model, strict)
        assert extended[:len(strict)] == strict
        assert (1, 2) in [b.key for b in extended]

    def test_well_bonded_graph_skips_backfill(self, make_model):
        model = make_model([("C", (0, 0, 0)), ("C", (1.5, 0, 0)), ("C", (3.0, 0, 0)), ("P", (5.4, 0, 0))])
        bonds = BondInferenceEngine().infer_bonds(model)
        assert [b.key for b in bonds] == [(0, 1), (1, 2)]


class TestSimpleBonds:
    def test_ignores_valence(self, make_model):
        model = make_model(METHANE_PLUS)
        bonds = BondInferenceEngine().simple_bonds(model)
        assert _degree(bonds, 0) == 6

    def test_sorted_by_distance(self, make_model):
        model = make_model([("C", (0, 0, 0)), ("C", (2.0, 0, 0)), ("C", (1.0, 0, 0))])
        lengths = [b.length for b in BondInferenceEngine().simple_bonds(model)]
        assert lengths == sorted(lengths)
