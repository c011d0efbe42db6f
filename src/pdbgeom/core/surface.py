#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Surface Approximation Module

Builds per-residue "blobs" of enlarged overlapping spheres joined by short
struts, as a cheap stand-in for a molecular surface.
"""

from collections import OrderedDict
from typing import Dict, List, Optional, Sequence

import numpy as np
import torch
from sklearn.neighbors import NearestNeighbors
from tqdm import tqdm

from ..config import GeometryConfig
from ..models.atom import Atom
from ..models.element import Element
from ..models.geometry import ResidueSurfaceBlob, SurfaceSphere, SurfaceStrut
from ..models.residue import DEFAULT_CLASS, residue_class
from ..models.structure import Model
from ..utils.common import CancellationToken, check_cancelled
from ..utils.distance_utils import calculate_atom_pair_distances
from ..utils.logger import Logger
from ..utils.vector_utils import safe_normalize

ELEMENT_CLASSES: Dict[Element, str] = {
    Element.C: "hydrophobic",
    Element.H: "hydrophobic",
    Element.N: "polar",
    Element.S: "polar",
    Element.O: "acidic",
    Element.P: "acidic",
}

ELEMENT_GROUP_PREFIX = "ELEM_"


def classify_residue(res_name: str) -> str:
    """
    Material class of a residue.

    Args:
        res_name (str): Three-letter residue name

    Returns:
        str: hydrophobic, polar, acidic, basic or default
    """
    return residue_class(res_name)


def classify_element(element: Element) -> str:
    return ELEMENT_CLASSES.get(element, DEFAULT_CLASS)


def group_atoms_by_residue(atoms: Sequence[Atom]) -> "OrderedDict[str, List[int]]":
    """
    Group atoms carrying residue metadata by (chain, residue name, residue number).

    Args:
        atoms (Sequence[Atom]): Atoms to group

    Returns:
        OrderedDict[str, List[int]]: "chain:name:number" to atom indices, first-seen order
    """
    groups: "OrderedDict[str, List[int]]" = OrderedDict()
    for atom in atoms:
        if not atom.has_residue:
            continue
        key = f"{atom.chain_id}:{atom.res_name}:{atom.res_seq}"
        groups.setdefault(key, []).append(atom.index)
    return groups


def group_atoms_by_element(atoms: Sequence[Atom]) -> "OrderedDict[str, List[int]]":
    """Group atoms by element symbol, first-seen order."""
    groups: "OrderedDict[str, List[int]]" = OrderedDict()
    for atom in atoms:
        groups.setdefault(ELEMENT_GROUP_PREFIX + atom.element.symbol, []).append(atom.index)
    return groups


def match_atoms_to_records(atoms: Sequence[Atom], records: Sequence[Atom],
                           tolerance: float = 0.05) -> Dict[int, int]:
    """
    Recover residue metadata by position for atoms that lost it.

    Each atom is matched to the closest record of the same element lying
    strictly within ``tolerance``.

    Args:
        atoms (Sequence[Atom]): Atoms without residue metadata
        records (Sequence[Atom]): Parsed atoms that carry residue metadata
        tolerance (float): Match radius in Å

    Returns:
        Dict[int, int]: Atom index to position in ``records``
    """
    by_element: Dict[Element, List[int]] = {}
    for position, record in enumerate(records):
        by_element.setdefault(record.element, []).append(position)

    matches: Dict[int, int] = {}
    queries: Dict[Element, List[Atom]] = {}
    for atom in atoms:
        if atom.element in by_element:
            queries.setdefault(atom.element, []).append(atom)

    for element, element_atoms in queries.items():
        candidates = by_element[element]
        reference = np.asarray([records[c].position for c in candidates], dtype=np.float64)
        index = NearestNeighbors(n_neighbors=1).fit(reference)
        distances, nearest = index.kneighbors(np.asarray([a.position for a in element_atoms], dtype=np.float64))
        for atom, distance, hit in zip(element_atoms, distances[:, 0], nearest[:, 0]):
            if distance < tolerance:
                matches[atom.index] = candidates[int(hit)]
    return matches


class SurfaceApproximator:
    """
    Per-residue blob builder.

    Attributes:
        config (GeometryConfig): Sphere scales and strut parameters
        logger (Logger): Logger instance
    """
    def __init__(self, config: Optional[GeometryConfig] = None, logger: Optional[Logger] = None):
        self.config = config or GeometryConfig()
        self.logger = logger or Logger()

    def residue_groups(self, model: Model, reference: Optional[Sequence[Atom]] = None) -> "OrderedDict[str, List[int]]":
        """
        Choose the atom grouping for a model.

        Residue metadata carried by the atoms is used directly.  Otherwise, when
        reference records are supplied, atoms are matched to them by position.
        If neither yields a group the atoms are grouped by element.
        """
        groups = group_atoms_by_residue(model.atoms)
        if not groups and reference:
            matches = match_atoms_to_records(model.atoms, reference, self.config.match_tolerance)
            self.logger.debug(f"Matched {len(matches)}/{model.atom_count} atoms to reference records by position")
            groups = OrderedDict()
            for atom in model.atoms:
                if atom.index in matches:
                    record = reference[matches[atom.index]]
                    if record.has_residue:
                        key = f"{record.chain_id}:{record.res_name}:{record.res_seq}"
                        groups.setdefault(key, []).append(atom.index)
        if not groups:
            self.logger.debug("No residue grouping available, grouping atoms by element")
            groups = group_atoms_by_element(model.atoms)
        return groups

    def _material(self, key: str, model: Model, members: List[int]) -> str:
        if key.startswith(ELEMENT_GROUP_PREFIX):
            return classify_element(model.atoms[members[0]].element)
        return classify_residue(key.split(":")[1])

    def build_blob(self, model: Model, key: str, members: List[int]) -> ResidueSurfaceBlob:
        """
        Spheres and struts for one group of at least one atom.

        Args:
            model (Model): Source model
            key (str): Group key
            members (List[int]): Atom indices of the group

        Returns:
            ResidueSurfaceBlob: Blob with its material class
        """
        cfg = self.config
        blob = ResidueSurfaceBlob(key, self._material(key, model, members), list(members))
        if len(members) == 1:
            atom = model.atoms[members[0]]
            blob.spheres.append(SurfaceSphere(atom.position, atom.element.display_radius * cfg.surface_single_scale,
                                              atom.index))
            return blob

        for index in members:
            atom = model.atoms[index]
            blob.spheres.append(SurfaceSphere(atom.position, atom.element.display_radius * cfg.surface_sphere_scale,
                                              index))

        coords = model.coordinates[torch.tensor(members, dtype=torch.long)]
        distances = calculate_atom_pair_distances(coords, coords)
        upper = torch.triu(torch.ones_like(distances, dtype=torch.bool), diagonal=1)
        rows, cols = torch.nonzero(upper & (distances < cfg.strut_distance), as_tuple=True)
        if rows.numel():
            up = torch.tensor([0.0, 1.0, 0.0], dtype=coords.dtype)
            centers = (coords[rows] + coords[cols]) / 2
            directions = safe_normalize(coords[cols] - coords[rows], fallback=up)
            lengths = distances[rows, cols] * cfg.strut_length_factor
            for a, b, center, direction, length in zip(rows.tolist(), cols.tolist(), centers.tolist(),
                                                       directions.tolist(), lengths.tolist()):
                blob.struts.append(SurfaceStrut(members[a], members[b], tuple(center), tuple(direction),
                                                length, cfg.strut_radius))
        return blob

    def placeholder(self, model: Model) -> ResidueSurfaceBlob:
        centroid = tuple(model.centroid().tolist())
        return ResidueSurfaceBlob("placeholder", DEFAULT_CLASS, [],
                                  [SurfaceSphere(centroid, self.config.placeholder_radius)])

    def build(self, model: Model, reference: Optional[Sequence[Atom]] = None,
              token: Optional[CancellationToken] = None) -> List[ResidueSurfaceBlob]:
        """
        Build surface blobs for a model.

        Args:
            model (Model): Source model
            reference (Optional[Sequence[Atom]]): Parsed atoms used to recover residue
                metadata by position when the model atoms lack it
            token (Optional[CancellationToken]): Checked between groups

        Returns:
            List[ResidueSurfaceBlob]: Blobs in group order; never empty
        """
        groups = self.residue_groups(model, reference)
        blobs: List[ResidueSurfaceBlob] = []
        for key, members in tqdm(groups.items(), desc="Surface groups",
                                 disable=not self.config.show_progress, leave=False):
            check_cancelled(token)
            if not members:
                continue
            blobs.append(self.build_blob(model, key, members))

        check_cancelled(token)
        if not blobs:
            self.logger.warning("No surface blob could be built, using a placeholder sphere")
            blobs.append(self.placeholder(model))
        self.logger.info(f"Built {len(blobs)} surface blobs")
        return blobs
