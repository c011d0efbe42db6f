#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Structure Statistics Module

Summarizes the composition of parsed structures for reporting.
"""

from typing import Any, Dict, Optional

from ..models.structure import Model, StructureFile


class StructureStatistics:
    """
    Generates statistics for a parsed structure file.

    Attributes:
        structure (StructureFile): The structure to analyze
    """
    def __init__(self, structure: StructureFile):
        self.structure = structure

    def get_statistics(self, model_number: Optional[int] = None) -> Dict[str, Any]:
        """
        Calculate summary statistics for one model of the structure.

        Args:
            model_number (Optional[int]): MODEL serial, defaults to the first model

        Returns:
            Dict[str, Any]: Dictionary containing structure statistics
        """
        model = self.structure.get_model(model_number)
        composition = model.composition()
        extent = model.extent()
        return {
            'models': self.structure.model_count,
            'model_number': model.model_number,
            'total_atoms': model.atom_count,
            'atom_records': self._count_record_type(model, 'ATOM'),
            'hetatm_records': self._count_record_type(model, 'HETATM'),
            'unknown_elements': composition['elements'].get('X', 0),
            'chains': len(composition['chains']),
            'residues': sum(composition['chain_residues'].values()),
            'helix_ranges': self.structure.metadata()['helices'],
            'sheet_ranges': self.structure.metadata()['sheets'],
            'extent': [round(v, 3) for v in extent['size']],
            'centroid': [round(v, 3) for v in extent['centroid']],
            'warnings': len(self.structure.warnings),
            'errors': len(self.structure.errors),
        }

    def get_composition(self, model_number: Optional[int] = None) -> Dict[str, Dict]:
        return self.structure.get_model(model_number).composition()

    def _count_record_type(self, model: Model, record_type: str) -> int:
        return sum(1 for atom in model.atoms if atom.record_type == record_type)
