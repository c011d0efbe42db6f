#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Geometry Writer Module

Handles JSON export of derived geometry and the logger-based parsing reports.
"""

import json
import os
from typing import Any, Dict, Optional

import numpy as np
import torch

from ..core.representations import GeometryResult
from ..models.structure import Model, StructureFile
from ..utils.logger import Logger


def _to_serializable(value: Any) -> Any:
    if isinstance(value, torch.Tensor):
        return value.detach().cpu().tolist()
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class GeometryWriter:
    """
    Writer for geometry JSON files and console reports.

    Attributes:
        logger (Logger): Logger instance for debug logging
        scale (float): Multiplier applied to every exported length
    """
    def __init__(self, logger: Optional[Logger] = None, scale: float = 1.0):
        self.logger = logger or Logger()
        self.scale = scale

    def to_payload(self, result: GeometryResult, structure: Optional[StructureFile] = None) -> Dict[str, Any]:
        payload = result.to_dict(self.scale)
        payload['scale'] = self.scale
        if structure is not None:
            payload['metadata'] = structure.metadata()
        return payload

    def write_string(self, result: GeometryResult, structure: Optional[StructureFile] = None,
                     indent: Optional[int] = 2) -> str:
        """
        Serialize derived geometry to a JSON string.

        Args:
            result (GeometryResult): Geometry to export
            structure (Optional[StructureFile]): Source file whose metadata is embedded
            indent (Optional[int]): JSON indentation

        Returns:
            str: JSON document
        """
        return json.dumps(self.to_payload(result, structure), indent=indent, default=_to_serializable)

    def write_file(self, result: GeometryResult, output_path: str,
                   structure: Optional[StructureFile] = None) -> bool:
        """
        Write derived geometry to a JSON file.

        Args:
            result (GeometryResult): Geometry to export
            output_path (str): Destination path
            structure (Optional[StructureFile]): Source file whose metadata is embedded

        Returns:
            bool: True if write was successful, False otherwise
        """
        self.logger.debug(f"Starting to write geometry file: {output_path}")
        try:
            out_dir = os.path.dirname(output_path)
            if out_dir:
                os.makedirs(out_dir, exist_ok=True)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(self.write_string(result, structure))
        except PermissionError:
            self.logger.error(f"Permission denied for writing to {output_path}")
            return False
        except OSError as e:
            self.logger.error(f"Error writing geometry file {output_path}: {e}")
            return False
        self.logger.debug(f"Successfully wrote geometry file: {output_path}")
        return True

    def write_atom_summary(self, model: Model, start: int = 0, end: Optional[int] = None) -> None:
        """
        Print an atom summary table using the logger.

        Args:
            model (Model): Model to summarize
            start (int): Start index for summary
            end (Optional[int]): End index for summary, None for all atoms
        """
        if end is None or end > model.atom_count:
            end = model.atom_count
        if start >= end:
            self.logger.error("Start index is greater than or equal to end index")
            return

        headers = ["Index", "Record", "Element", "Atom", "Residue", "Chain", "Res Seq", "Line", "x", "y", "z"]
        rows = []
        for atom in model.atoms[start:end]:
            x, y, z = atom.position
            rows.append([
                f"{atom.index:5d}",
                f"{atom.record_type:>6}",
                f"{atom.element.symbol:>3}",
                f"{atom.atom_name:>4}",
                f"{atom.res_name:>3}",
                f"{atom.chain_id:>2}",
                f"{atom.res_seq if atom.res_seq is not None else '-':>5}",
                f"{atom.line_number:>5}",
                f"{x:8.3f}",
                f"{y:8.3f}",
                f"{z:8.3f}",
            ])
        self.logger.section(f"Atom Information Summary ({start} to {end - 1})")
        self.logger.table(headers, rows)

    def write_parsing_report(self, structure: StructureFile) -> None:
        """
        Write a parsing report using the logger.

        Args:
            structure (StructureFile): Parsed structure
        """
        self.logger.section("PDB File Parsing Report")
        self.logger.info(f"File: {structure.source or '<string>'}")
        if structure.identifier:
            self.logger.info(f"Identifier: {structure.identifier}")
        if structure.classification:
            self.logger.info(f"Classification: {structure.classification}")
        if structure.title:
            self.logger.info(f"Title: {structure.title}")
        if structure.authors:
            self.logger.info(f"Authors: {structure.authors}")
        if structure.resolution is not None:
            self.logger.info(f"Resolution: {structure.resolution:.2f} Å")
        self.logger.info(f"Lines read: {structure.line_count}")
        self.logger.info(f"Models: {structure.model_count}")
        self.logger.info(f"Total atoms: {structure.atom_count}")
        self.logger.info(f"Parsing errors: {len(structure.errors)}")
        self.logger.info(f"Parsing warnings: {len(structure.warnings)}")

        if structure.errors:
            self.logger.section(f"Error Messages ({len(structure.errors)})")
            for error in structure.errors:
                self.logger.error(error, indent=2)

        if structure.warnings:
            self.logger.section(f"Warning Messages ({len(structure.warnings)})")
            for warning in structure.warnings:
                self.logger.warning(warning, indent=2)

    def write_composition(self, composition: Dict[str, Dict]) -> None:
        """Log each composition table as a two-column table."""
        for title, counts in composition.items():
            if not counts:
                continue
            self.logger.section(title.replace('_', ' ').title())
            rows = sorted(counts.items(), key=lambda item: (-item[1], str(item[0])))
            self.logger.table(["Key", "Count"], rows, indent=2)

    def write_geometry_summary(self, result: GeometryResult) -> None:
        self.logger.section(f"Geometry Summary ({result.mode})")
        self.logger.info(f"Model: {result.model_number}")
        self.logger.info(f"Atoms: {len(result.atoms)}")
        if result.bonds:
            self.logger.info(f"Bonds: {len(result.bonds)}")
        if result.segments:
            rows = [[i, s.chain_id, s.structure.value, len(s), f"{s.residues[0]}-{s.residues[-1]}",
                     "yes" if s.simplified else "no"] for i, s in enumerate(result.segments)]
            self.logger.table(["Segment", "Chain", "Structure", "Samples", "Residues", "Simplified"], rows)
        if result.overrides:
            self.logger.info(f"Relaxed positions: {len(result.overrides)}")
        if result.blobs:
            self.logger.info(f"Surface blobs: {len(result.blobs)}")
