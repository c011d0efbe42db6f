#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Residue Type Model

Defines the ResidueType enumeration and the residue classification tables
used for surface materials and composition summaries.
"""

from enum import Enum
from typing import Dict, FrozenSet


class ResidueType(Enum):
    """Standard amino acid and nucleotide codes with an UNK fallback."""
    ALA = "ALA"
    ARG = "ARG"
    ASN = "ASN"
    ASP = "ASP"
    CYS = "CYS"
    GLU = "GLU"
    GLN = "GLN"
    GLY = "GLY"
    HIS = "HIS"
    ILE = "ILE"
    LEU = "LEU"
    LYS = "LYS"
    MET = "MET"
    PHE = "PHE"
    PRO = "PRO"
    SER = "SER"
    THR = "THR"
    TRP = "TRP"
    TYR = "TYR"
    VAL = "VAL"
    SEC = "SEC"
    PYL = "PYL"
    ASX = "ASX"
    GLX = "GLX"
    DA = "DA"
    DC = "DC"
    DG = "DG"
    DT = "DT"
    A = "A"
    C = "C"
    G = "G"
    U = "U"
    UNK = "UNK"

    @classmethod
    def from_code(cls, code: str) -> "ResidueType":
        """
        Resolve a residue name by exact match of the trimmed code.

        Args:
            code (str): Residue name from columns 18-20

        Returns:
            ResidueType: Matching type, or ResidueType.UNK
        """
        return _CODE_LOOKUP.get(code.strip().upper(), cls.UNK)

    @property
    def is_amino_acid(self) -> bool:
        return self in AMINO_ACIDS

    @property
    def is_nucleotide(self) -> bool:
        return self in NUCLEOTIDES


_CODE_LOOKUP: Dict[str, ResidueType] = {r.value: r for r in ResidueType}

AMINO_ACIDS: FrozenSet[ResidueType] = frozenset({
    ResidueType.ALA, ResidueType.ARG, ResidueType.ASN, ResidueType.ASP,
    ResidueType.CYS, ResidueType.GLU, ResidueType.GLN, ResidueType.GLY,
    ResidueType.HIS, ResidueType.ILE, ResidueType.LEU, ResidueType.LYS,
    ResidueType.MET, ResidueType.PHE, ResidueType.PRO, ResidueType.SER,
    ResidueType.THR, ResidueType.TRP, ResidueType.TYR, ResidueType.VAL,
    ResidueType.SEC, ResidueType.PYL, ResidueType.ASX, ResidueType.GLX,
})

NUCLEOTIDES: FrozenSet[ResidueType] = frozenset({
    ResidueType.DA, ResidueType.DC, ResidueType.DG, ResidueType.DT,
    ResidueType.A, ResidueType.C, ResidueType.G, ResidueType.U,
})

# Surface material classes keyed by residue name
RESIDUE_CLASSES: Dict[str, FrozenSet[str]] = {
    "hydrophobic": frozenset({"ALA", "VAL", "ILE", "LEU", "MET", "PHE", "TRP", "PRO", "GLY"}),
    "polar": frozenset({"SER", "THR", "ASN", "GLN", "TYR", "CYS"}),
    "acidic": frozenset({"ASP", "GLU"}),
    "basic": frozenset({"LYS", "ARG", "HIS"}),
}

# Composition statistics classes, checked in order; a residue counts once
COMPOSITION_CLASSES: Dict[str, FrozenSet[str]] = {
    "hydrophobic": frozenset({"ALA", "LEU", "VAL", "ILE", "MET", "PRO", "GLY"}),
    "polar": frozenset({"SER", "THR", "ASN", "GLN", "CYS"}),
    "acidic": frozenset({"ASP", "GLU"}),
    "basic": frozenset({"LYS", "ARG", "HIS"}),
    "aromatic": frozenset({"PHE", "TYR", "TRP"}),
}

OTHER_CLASS = "other"

DEFAULT_CLASS = "default"


def residue_class(res_name: str) -> str:
    """
    Map a residue name to its material class.

    Args:
        res_name (str): Three-letter residue name

    Returns:
        str: One of hydrophobic, polar, acidic, basic or default
    """
    name = res_name.strip().upper()
    for class_name, members in RESIDUE_CLASSES.items():
        if name in members:
            return class_name
    return DEFAULT_CLASS


def composition_class(res_name: str) -> str:
    """First composition class containing the residue name, else ``other``."""
    name = res_name.strip().upper()
    for class_name, members in COMPOSITION_CLASSES.items():
        if name in members:
            return class_name
    return OTHER_CLASS
