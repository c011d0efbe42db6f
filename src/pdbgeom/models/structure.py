#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Structure Data Model

Defines the Model (one structural frame), the StructureFile container and the
secondary structure range map shared by all models of a file.
"""

from collections import Counter, OrderedDict
from typing import Dict, List, Optional, Sequence, Tuple

import torch

from .atom import Atom
from .chain import SecondaryStructure
from .element import Element
from .residue import composition_class


class SecondaryStructureMap:
    """
    Secondary structure ranges keyed by chain and inclusive residue interval.

    Ranges are checked in insertion order, so an earlier HELIX record wins over
    a later overlapping SHEET record.
    """
    def __init__(self):
        self.ranges: List[Tuple[str, int, int, SecondaryStructure]] = []

    def add_range(self, chain_id: str, start: int, end: int, structure: SecondaryStructure) -> None:
        if end < start:
            start, end = end, start
        self.ranges.append((chain_id, start, end, structure))

    def lookup(self, chain_id: str, res_seq: Optional[int]) -> SecondaryStructure:
        """
        Resolve the structure of one residue.

        Args:
            chain_id (str): Chain identifier
            res_seq (Optional[int]): Residue sequence number

        Returns:
            SecondaryStructure: Covering range structure, LOOP otherwise
        """
        if res_seq is None:
            return SecondaryStructure.LOOP
        for range_chain, start, end, structure in self.ranges:
            if range_chain == chain_id and start <= res_seq <= end:
                return structure
        return SecondaryStructure.LOOP

    def count(self, structure: SecondaryStructure) -> int:
        return sum(1 for r in self.ranges if r[3] is structure)

    def __len__(self) -> int:
        return len(self.ranges)


class Model:
    """
    One structural frame (NMR conformer, trajectory frame or the whole file).

    Attributes:
        model_number (int): MODEL serial, or 1 for the implicit model
        atoms (Tuple[Atom, ...]): Atoms in file order; ``atoms[i].index == i``
        coordinates (torch.Tensor): Atom positions in Å (shape: [N, 3], float32)
        secondary_structure (SecondaryStructureMap): Ranges from HELIX/SHEET records
        energy (Optional[float]): Per-model energy when the source provides one
    """
    def __init__(self, atoms: Sequence[Atom], model_number: int = 1,
                 secondary_structure: Optional[SecondaryStructureMap] = None,
                 energy: Optional[float] = None):
        self.model_number = model_number
        self.atoms: Tuple[Atom, ...] = tuple(atoms)
        self.secondary_structure = secondary_structure or SecondaryStructureMap()
        self.energy = energy
        if self.atoms:
            self.coordinates = torch.tensor([a.position for a in self.atoms], dtype=torch.float32)
        else:
            self.coordinates = torch.empty(0, 3, dtype=torch.float32)

    def __len__(self) -> int:
        return len(self.atoms)

    @property
    def atom_count(self) -> int:
        return len(self.atoms)

    @property
    def has_residue_metadata(self) -> bool:
        return any(atom.has_residue for atom in self.atoms)

    def structure_of(self, atom: Atom) -> SecondaryStructure:
        return self.secondary_structure.lookup(atom.chain_id, atom.res_seq)

    def atom_secondary_structure(self) -> List[SecondaryStructure]:
        """Secondary structure of every atom's residue, in atom order."""
        return [self.structure_of(atom) for atom in self.atoms]

    def composition(self) -> Dict[str, Dict]:
        """
        Aggregate composition summary used for reporting.

        Returns:
            Dict[str, Dict]: Counts keyed by ``elements``, ``chains``, ``residues``,
            ``residue_classes`` and ``chain_residues`` (distinct residues per chain)
        """
        elements = Counter(atom.element.symbol for atom in self.atoms)
        chains = Counter(atom.chain_id for atom in self.atoms)
        residues = Counter(atom.res_name for atom in self.atoms if atom.res_name)

        residue_classes: Counter = Counter()
        for atom in self.atoms:
            if not atom.res_name:
                continue
            residue_classes[composition_class(atom.res_name)] += 1

        chain_residues: Dict[str, set] = OrderedDict()
        for atom in self.atoms:
            if atom.res_seq is not None:
                chain_residues.setdefault(atom.chain_id, set()).add(atom.res_seq)

        return {
            'elements': dict(elements),
            'chains': dict(chains),
            'residues': dict(residues),
            'residue_classes': dict(residue_classes),
            'chain_residues': {chain: len(numbers) for chain, numbers in chain_residues.items()},
        }

    def extent(self) -> Dict[str, List[float]]:
        """
        Axis-aligned bounding box and centroid.

        Returns:
            Dict[str, List[float]]: ``min``, ``max``, ``size`` and ``centroid`` in Å
        """
        if self.atom_count == 0:
            zero = [0.0, 0.0, 0.0]
            return {'min': zero, 'max': zero, 'size': zero, 'centroid': zero}
        lower = torch.min(self.coordinates, dim=0).values
        upper = torch.max(self.coordinates, dim=0).values
        return {
            'min': lower.tolist(),
            'max': upper.tolist(),
            'size': (upper - lower).tolist(),
            'centroid': torch.mean(self.coordinates, dim=0).tolist(),
        }

    def centroid(self) -> torch.Tensor:
        if self.atom_count == 0:
            return torch.zeros(3, dtype=torch.float32)
        return torch.mean(self.coordinates, dim=0)

    def subsample(self, max_atoms: Optional[int]) -> Tuple['Model', List[int]]:
        """
        Stride through the atoms so at most ``max_atoms`` remain.

        Args:
            max_atoms (Optional[int]): Cap; None or a value >= atom count keeps every atom

        Returns:
            Tuple[Model, List[int]]: Reduced model and, for each of its atoms, the
            index of the source atom in this model
        """
        if max_atoms is None or self.atom_count <= max_atoms:
            return self, list(range(self.atom_count))
        stride = -(-self.atom_count // max_atoms)
        kept = list(range(0, self.atom_count, stride))[:max_atoms]
        atoms = [self.atoms[i].with_index(new) for new, i in enumerate(kept)]
        return Model(atoms, self.model_number, self.secondary_structure, self.energy), kept

    def rendering_positions(self, scale: float = 0.1) -> torch.Tensor:
        return self.coordinates * scale

    def element_counts(self) -> Dict[Element, int]:
        return dict(Counter(atom.element for atom in self.atoms))

    def __repr__(self) -> str:
        return f"Model({self.model_number}, {self.atom_count} atoms)"


class StructureFile:
    """
    Parsed structure file: metadata plus the ordered list of models.

    Attributes:
        identifier (str): HEADER id code
        classification (str): HEADER classification text
        title (str): Joined TITLE text
        authors (str): Joined AUTHOR text
        resolution (Optional[float]): REMARK 2 resolution in Å
        models (List[Model]): Models in file order
        secondary_structure (SecondaryStructureMap): File-wide HELIX/SHEET ranges
        warnings (List[str]): Line-numbered diagnostics for skipped or suspect lines
        errors (List[str]): Fatal problems found while parsing
        source (Optional[str]): Source name or path
    """
    def __init__(self, source: Optional[str] = None):
        self.identifier = ""
        self.classification = ""
        self.title = ""
        self.authors = ""
        self.resolution: Optional[float] = None
        self.models: List[Model] = []
        self.secondary_structure = SecondaryStructureMap()
        self.warnings: List[str] = []
        self.errors: List[str] = []
        self.source = source
        self.line_count = 0

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)

    def add_error(self, error: str) -> None:
        self.errors.append(error)

    @property
    def model_count(self) -> int:
        return len(self.models)

    @property
    def atom_count(self) -> int:
        return sum(model.atom_count for model in self.models)

    @property
    def name(self) -> str:
        """Display name: identifier, then classification, then source."""
        return self.identifier or self.classification or (self.source or "")

    def get_model(self, number: Optional[int] = None) -> Model:
        """
        Select a model by MODEL serial number, or the first model.

        Args:
            number (Optional[int]): MODEL serial

        Returns:
            Model: Selected model

        Raises:
            KeyError: If no model carries that serial number
        """
        if number is None:
            return self.models[0]
        for model in self.models:
            if model.model_number == number:
                return model
        raise KeyError(f"Model {number} not found (available: {[m.model_number for m in self.models]})")

    def metadata(self) -> Dict:
        return {
            'identifier': self.identifier,
            'classification': self.classification,
            'title': self.title,
            'authors': self.authors,
            'resolution': self.resolution,
            'models': self.model_count,
            'atoms': self.atom_count,
            'helices': self.secondary_structure.count(SecondaryStructure.HELIX),
            'sheets': self.secondary_structure.count(SecondaryStructure.SHEET),
        }

    def __repr__(self) -> str:
        return f"StructureFile({self.name!r}, {self.model_count} models, {self.atom_count} atoms)"
