#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Atom Data Model

Defines the immutable Atom record produced by the parser.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .element import Element
from .residue import ResidueType


@dataclass(frozen=True)
class Atom:
    """
    Parsed atom, identified by its stable index within the owning model.

    Attributes:
        index (int): Position in the model's atom sequence
        element (Element): Resolved chemical element
        position (Tuple[float, float, float]): Coordinates in Å
        atom_name (str): Atom name (e.g. "CA")
        res_name (str): Residue name as written in the file
        residue_type (ResidueType): Resolved residue type
        chain_id (str): Chain identifier
        res_seq (Optional[int]): Residue sequence number, None when unavailable
        line_number (int): 1-based source line, 0 for atoms not read from text
        record_type (str): ATOM or HETATM
    """
    index: int
    element: Element
    position: Tuple[float, float, float]
    atom_name: str = ""                                  # 13-16
    res_name: str = ""                                   # 18-20
    residue_type: ResidueType = ResidueType.UNK
    chain_id: str = "A"                                  # 22
    res_seq: Optional[int] = None                        # 23-26
    line_number: int = 0
    record_type: str = "ATOM"                            # 1-6

    @property
    def has_residue(self) -> bool:
        return self.res_seq is not None and bool(self.res_name)

    @property
    def residue_key(self) -> Tuple[str, str, Optional[int]]:
        """Grouping key (chain, residue name, residue number)."""
        return (self.chain_id, self.res_name, self.res_seq)

    def with_index(self, index: int) -> "Atom":
        """Copy of this atom renumbered for another model."""
        return Atom(index, self.element, self.position, self.atom_name, self.res_name,
                    self.residue_type, self.chain_id, self.res_seq, self.line_number,
                    self.record_type)

    def __repr__(self) -> str:
        return (f"Atom({self.index} {self.element.symbol} {self.atom_name} "
                f"{self.res_name} {self.chain_id}{self.res_seq if self.res_seq is not None else ''})")
