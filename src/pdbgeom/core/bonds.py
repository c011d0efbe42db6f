#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Bond Inference Module

Infers a bond graph from atom positions using distance thresholds and
element valence limits.
"""

from typing import Dict, List, Optional, Set, Tuple

import torch
from tqdm import tqdm

from ..config import GeometryConfig
from ..models.geometry import Bond
from ..models.structure import Model
from ..utils.common import CancellationToken, batched_range, check_cancelled
from ..utils.distance_utils import iter_pairs_within_cutoff
from ..utils.logger import Logger

Candidate = Tuple[float, int, int]


class BondInferenceEngine:
    """
    Distance and valence driven bond inference.

    Attributes:
        config (GeometryConfig): Thresholds and batching parameters
        logger (Logger): Logger instance
    """
    def __init__(self, config: Optional[GeometryConfig] = None, logger: Optional[Logger] = None):
        self.config = config or GeometryConfig()
        self.logger = logger or Logger()

    def candidate_pairs(self, model: Model, cutoff: float,
                        token: Optional[CancellationToken] = None) -> List[Candidate]:
        """
        Enumerate atom pairs within a cutoff, excluding unknown elements.

        Args:
            model (Model): Source model
            cutoff (float): Inclusive distance cutoff in Å
            token (Optional[CancellationToken]): Checked between row batches

        Returns:
            List[Candidate]: (distance, i, j) with i < j, sorted by distance then indices
        """
        known = [atom.index for atom in model.atoms if atom.element.is_known]
        if len(known) < 2:
            return []
        index_map = torch.tensor(known, dtype=torch.long)
        coords = model.coordinates[index_map]

        batch_size = self.config.batch_size
        batches = iter_pairs_within_cutoff(coords, cutoff, batch_size)
        total = len(list(batched_range(len(known), batch_size)))

        candidates: List[Candidate] = []
        for rows, cols, distances in tqdm(batches, total=total, desc="Bond candidates",
                                          disable=not self.config.show_progress, leave=False):
            check_cancelled(token)
            first = index_map[rows].tolist()
            second = index_map[cols].tolist()
            for i, j, d in zip(first, second, distances.tolist()):
                candidates.append((d, min(i, j), max(i, j)))

        candidates.sort()
        return candidates

    def _accept_with_valence(self, model: Model, candidates: List[Candidate],
                             accept, bonds: List[Bond]) -> List[Bond]:
        counts: Dict[int, int] = {}
        bonded: Set[Tuple[int, int]] = set()
        for bond in bonds:
            bonded.add(bond.key)
            counts[bond.atom1] = counts.get(bond.atom1, 0) + 1
            counts[bond.atom2] = counts.get(bond.atom2, 0) + 1

        result = list(bonds)
        for distance, i, j in candidates:
            if i == j or (i, j) in bonded:
                continue
            if not accept(distance, i, j):
                continue
            if counts.get(i, 0) >= model.atoms[i].element.max_bonds:
                continue
            if counts.get(j, 0) >= model.atoms[j].element.max_bonds:
                continue
            result.append(Bond.between(i, j, distance))
            bonded.add((i, j))
            counts[i] = counts.get(i, 0) + 1
            counts[j] = counts.get(j, 0) + 1
        return result

    def strict_bonds(self, model: Model, token: Optional[CancellationToken] = None) -> List[Bond]:
        """
        Valence-ranked bond inference.

        Pairs within ``bond_threshold`` are visited shortest first and accepted
        only while both atoms are below their element's bond limit.

        Args:
            model (Model): Source model
            token (Optional[CancellationToken]): Cancellation token

        Returns:
            List[Bond]: Bonds in acceptance order
        """
        candidates = self.candidate_pairs(model, self.config.bond_threshold, token)
        bonds = self._accept_with_valence(model, candidates, lambda d, i, j: True, [])
        self.logger.debug(f"Strict pass: {len(bonds)} bonds from {len(candidates)} candidate pairs")
        return bonds

    def pair_threshold(self, model: Model, i: int, j: int) -> float:
        threshold = self.config.pair_threshold(model.atoms[i].element.symbol, model.atoms[j].element.symbol)
        return threshold if threshold is not None else self.config.generous_bond_threshold

    def permissive_bonds(self, model: Model, existing: Optional[List[Bond]] = None,
                         token: Optional[CancellationToken] = None) -> List[Bond]:
        """
        Long-range pass using element-pair thresholds.

        Recognized pairs use their tight threshold (C-C 1.8, O-H 2.0, ...);
        any other pair uses ``generous_bond_threshold``.  Existing bonds are
        kept and count toward valence.

        Args:
            model (Model): Source model
            existing (Optional[List[Bond]]): Bonds to extend
            token (Optional[CancellationToken]): Cancellation token

        Returns:
            List[Bond]: Existing bonds followed by the newly accepted ones
        """
        candidates = self.candidate_pairs(model, self.config.long_range_threshold, token)
        def accept(distance: float, i: int, j: int) -> bool:
            return distance <= self.pair_threshold(model, i, j)

        bonds = self._accept_with_valence(model, candidates, accept, existing or [])
        self.logger.debug(f"Permissive pass: {len(bonds) - len(existing or [])} bonds added")
        return bonds

    def is_underbonded(self, model: Model, bonds: List[Bond]) -> bool:
        return len(bonds) < model.atom_count * self.config.underbonded_ratio

    def infer_bonds(self, model: Model, token: Optional[CancellationToken] = None) -> List[Bond]:
        """
        Strict inference with an automatic permissive backfill.

        Args:
            model (Model): Source model
            token (Optional[CancellationToken]): Cancellation token

        Returns:
            List[Bond]: Final bond list
        """
        bonds = self.strict_bonds(model, token)
        if self.is_underbonded(model, bonds):
            self.logger.debug(f"Under-bonded graph ({len(bonds)} bonds for {model.atom_count} atoms), "
                              f"running permissive pass")
            bonds = self.permissive_bonds(model, bonds, token)
        self.logger.info(f"Inferred {len(bonds)} bonds for {model.atom_count} atoms")
        return bonds

    def simple_bonds(self, model: Model, token: Optional[CancellationToken] = None) -> List[Bond]:
        """
        Plain distance bonds without valence limits.

        Args:
            model (Model): Source model
            token (Optional[CancellationToken]): Cancellation token

        Returns:
            List[Bond]: One bond per pair within ``bond_threshold``
        """
        candidates = self.candidate_pairs(model, self.config.bond_threshold, token)
        return [Bond.between(i, j, d) for d, i, j in candidates if i != j]
