#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Derived Geometry Models

Value types handed to the rendering layer: bonds, backbone chains, ribbon
segments and surface blobs.  Each type serialises to plain data with
``to_dict``; positions are multiplied by ``scale`` on export.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import torch

from .chain import SecondaryStructure

Vector = Tuple[float, float, float]


def _scaled(points: torch.Tensor, scale: float) -> List[List[float]]:
    return (points.detach().cpu().double() * scale).tolist()


@dataclass(frozen=True)
class Bond:
    """
    Undirected bond stored once with ``atom1 < atom2``.

    Attributes:
        atom1 (int): Lower atom index
        atom2 (int): Higher atom index
        length (float): Distance in Å
    """
    atom1: int
    atom2: int
    length: float

    @classmethod
    def between(cls, i: int, j: int, length: float) -> "Bond":
        if i == j:
            raise ValueError(f"Self bond on atom {i}")
        return cls(min(i, j), max(i, j), float(length))

    @property
    def key(self) -> Tuple[int, int]:
        return (self.atom1, self.atom2)

    def to_dict(self, scale: float = 1.0) -> Dict:
        return {'atomIndexA': self.atom1, 'atomIndexB': self.atom2, 'length': self.length * scale}


@dataclass
class BackboneChain:
    """
    Ordered backbone trace of one chain.

    Attributes:
        chain_id (str): Chain identifier
        positions (torch.Tensor): Backbone atom positions (shape: [N, 3])
        residue_numbers (List[int]): Residue number per position
        residue_names (List[str]): Residue name per position
        structures (List[SecondaryStructure]): Secondary structure per position
        atom_indices (List[int]): Model atom index per position
    """
    chain_id: str
    positions: torch.Tensor
    residue_numbers: List[int]
    residue_names: List[str]
    structures: List[SecondaryStructure]
    atom_indices: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return self.positions.shape[0]


@dataclass
class RibbonSegment:
    """
    Contiguous run of curve samples sharing one secondary structure.

    Attributes:
        chain_id (str): Owning chain
        structure (SecondaryStructure): Structure of every sample
        points (torch.Tensor): Sample positions (shape: [M, 3])
        normals (torch.Tensor): Unit normals (shape: [M, 3])
        residue_numbers (List[int]): Source residue of each sample
        simplified (bool): Helix too short for helical tube rendering
    """
    chain_id: str
    structure: SecondaryStructure
    points: torch.Tensor
    normals: torch.Tensor
    residue_numbers: List[int]
    simplified: bool = False

    def __len__(self) -> int:
        return self.points.shape[0]

    @property
    def residues(self) -> List[int]:
        """Distinct residue numbers covered, in sample order."""
        seen: List[int] = []
        for number in self.residue_numbers:
            if number not in seen:
                seen.append(number)
        return seen

    def to_dict(self, scale: float = 1.0) -> Dict:
        return {
            'chain': self.chain_id,
            'secondaryStructure': self.structure.value,
            'points': _scaled(self.points, scale),
            'normals': self.normals.detach().cpu().double().tolist(),
            'residueNumbers': list(self.residue_numbers),
            'simplified': self.simplified,
        }


@dataclass(frozen=True)
class SurfaceSphere:
    center: Vector
    radius: float
    atom_index: int = -1

    def to_dict(self, scale: float = 1.0) -> Dict:
        return {'center': [c * scale for c in self.center], 'radius': self.radius * scale,
                'atomIndex': self.atom_index}


@dataclass(frozen=True)
class SurfaceStrut:
    """Connective cylinder centred between two atoms of one blob."""
    start: int
    end: int
    center: Vector
    direction: Vector
    length: float
    radius: float

    def to_dict(self, scale: float = 1.0) -> Dict:
        return {'atomIndexA': self.start, 'atomIndexB': self.end,
                'center': [c * scale for c in self.center], 'direction': list(self.direction),
                'length': self.length * scale, 'radius': self.radius * scale}


@dataclass
class ResidueSurfaceBlob:
    """
    Overlapping spheres and struts approximating one residue's surface.

    Attributes:
        key (str): Group label, "chain:resname:resseq" or the element symbol
        material_class (str): hydrophobic, polar, acidic, basic or default
        atom_indices (List[int]): Member atoms
        spheres (List[SurfaceSphere]): Enlarged atom spheres
        struts (List[SurfaceStrut]): Connectors between close members
    """
    key: str
    material_class: str
    atom_indices: List[int]
    spheres: List[SurfaceSphere] = field(default_factory=list)
    struts: List[SurfaceStrut] = field(default_factory=list)

    def to_dict(self, scale: float = 1.0) -> Dict:
        return {
            'key': self.key,
            'materialClass': self.material_class,
            'atomIndices': list(self.atom_indices),
            'spheres': [s.to_dict(scale) for s in self.spheres],
            'struts': [s.to_dict(scale) for s in self.struts],
        }
