#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PDB Parser Module

Assembles tokenized records into models, resolves per-residue secondary
structure and reports skipped lines.
"""

import math
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import GeometryConfig
from ..errors import EmptyStructureError
from ..models.atom import Atom
from ..models.element import Element
from ..models.residue import ResidueType
from ..models.structure import Model, SecondaryStructureMap, StructureFile
from ..utils.logger import Logger
from .records import AtomRecord, ChainTerminator, ModelBoundary, ParsedRecords, parse_records


class DuplicateOxygenFilter:
    """
    Spatial hash that detects oxygen records repeating an earlier position.

    Two oxygens are duplicates when every axis differs by less than the tolerance.
    """
    def __init__(self, tolerance: float = 0.001):
        self.tolerance = tolerance
        self._cells: Dict[Tuple[int, int, int], List[Tuple[float, float, float]]] = {}

    def _cell(self, position: Tuple[float, float, float]) -> Tuple[int, int, int]:
        return tuple(int(math.floor(c / self.tolerance)) for c in position)

    def is_duplicate(self, position: Tuple[float, float, float]) -> bool:
        cx, cy, cz = self._cell(position)
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for dz in (-1, 0, 1):
                    for other in self._cells.get((cx + dx, cy + dy, cz + dz), ()):
                        if all(abs(a - b) < self.tolerance for a, b in zip(position, other)):
                            return True
        return False

    def add(self, position: Tuple[float, float, float]) -> None:
        self._cells.setdefault(self._cell(position), []).append(position)


def build_secondary_structure_map(parsed: ParsedRecords) -> SecondaryStructureMap:
    """Collect HELIX ranges followed by SHEET ranges."""
    ss_map = SecondaryStructureMap()
    for record in parsed.helices + parsed.sheets:
        ss_map.add_range(record.chain_id, record.start, record.end, record.structure)
    return ss_map


def _to_atom(record: AtomRecord, index: int) -> Atom:
    return Atom(
        index=index,
        element=record.element,
        position=record.position,
        atom_name=record.atom_name,
        res_name=record.res_name,
        residue_type=ResidueType.from_code(record.res_name),
        chain_id=record.chain_id,
        res_seq=record.res_seq,
        line_number=record.line_number,
        record_type=record.record_type,
    )


def assemble_models(parsed: ParsedRecords, secondary_structure: Optional[SecondaryStructureMap] = None,
                    config: Optional[GeometryConfig] = None,
                    logger: Optional[Logger] = None) -> List[Model]:
    """
    Group the atom stream into models.

    A model opens on MODEL or on the first atom outside any model and closes on
    ENDMDL; a model still open at end of input is closed there.  Models that end
    up empty are dropped.  Oxygen records repeating a position already seen in
    the same model are discarded.

    Args:
        parsed (ParsedRecords): Tokenized records
        secondary_structure (Optional[SecondaryStructureMap]): Ranges shared by all models
        config (Optional[GeometryConfig]): Tolerance source
        logger (Optional[Logger]): Logger instance

    Returns:
        List[Model]: Models in file order
    """
    config = config or GeometryConfig()
    logger = logger or Logger()
    secondary_structure = secondary_structure or build_secondary_structure_map(parsed)

    models: List[Model] = []
    current: Optional[List[Atom]] = None
    current_serial = 0
    oxygen_filter = DuplicateOxygenFilter(config.duplicate_oxygen_tolerance)

    def close() -> None:
        if current:
            models.append(Model(current, current_serial, secondary_structure))
        elif current is not None:
            logger.debug(f"Dropping empty model {current_serial}")

    for record in parsed.stream:
        if isinstance(record, ModelBoundary):
            if record.opens:
                close()
                current = []
                current_serial = record.serial if record.serial is not None else len(models) + 1
                oxygen_filter = DuplicateOxygenFilter(config.duplicate_oxygen_tolerance)
            else:
                close()
                current = None
            continue
        if isinstance(record, ChainTerminator):
            continue

        if current is None:
            current = []
            current_serial = len(models) + 1
            oxygen_filter = DuplicateOxygenFilter(config.duplicate_oxygen_tolerance)

        if record.element is Element.O:
            if oxygen_filter.is_duplicate(record.position):
                logger.debug(f"Line {record.line_number}: skipping duplicate oxygen at {record.position}")
                continue
            oxygen_filter.add(record.position)

        current.append(_to_atom(record, len(current)))

    close()
    return models


class PDBParser:
    """
    PDB text parser producing a StructureFile.

    Attributes:
        config (GeometryConfig): Parsing parameters
        logger (Logger): Logger instance for debug logging
    """
    def __init__(self, config: Optional[GeometryConfig] = None, logger: Optional[Logger] = None):
        self.config = config or GeometryConfig()
        self.logger = logger or Logger()

    def parse_file(self, file_path: str) -> StructureFile:
        """
        Read and parse a PDB file.

        Args:
            file_path (str): Path to PDB file

        Returns:
            StructureFile: Parsed structure

        Raises:
            OSError: If the file cannot be read
            EmptyStructureError: If no atom survives parsing
        """
        try:
            with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
                lines = f.read().splitlines()
        except FileNotFoundError:
            self.logger.error(f"File not found: {file_path}")
            raise
        except PermissionError:
            self.logger.error(f"Permission denied for file: {file_path}")
            raise
        self.logger.debug(f"Successfully read {len(lines)} lines from {file_path}")
        return self.parse_lines(lines, source=file_path)

    def parse_string(self, text: str, source: Optional[str] = None) -> StructureFile:
        """
        Parse PDB text held in memory.

        Args:
            text (str): Full file contents
            source (Optional[str]): Name used in diagnostics

        Returns:
            StructureFile: Parsed structure

        Raises:
            EmptyStructureError: If no atom survives parsing
        """
        return self.parse_lines(text.splitlines(), source=source)

    def parse_lines(self, lines: Sequence[str], source: Optional[str] = None) -> StructureFile:
        self.logger.debug("Starting PDB parsing process")
        parsed = parse_records(lines)

        structure = StructureFile(source)
        structure.identifier = parsed.identifier
        structure.classification = parsed.classification
        structure.title = parsed.title
        structure.authors = parsed.authors
        structure.resolution = parsed.resolution
        structure.line_count = parsed.line_count
        structure.secondary_structure = build_secondary_structure_map(parsed)

        for diagnostic in parsed.diagnostics:
            structure.add_warning(diagnostic)
            self.logger.debug(diagnostic)
        if parsed.unknown_elements:
            message = f"{parsed.unknown_elements} atom record(s) have an unknown element"
            structure.add_warning(message)
            self.logger.warning(message)

        structure.models = assemble_models(parsed, structure.secondary_structure, self.config, self.logger)

        if structure.atom_count == 0:
            self.logger.error(f"No atoms found in {source or 'input'}")
            raise EmptyStructureError(diagnostics=structure.warnings, source=source)

        if parsed.diagnostics:
            self.logger.warning(f"Skipped {len(parsed.diagnostics)} malformed line(s)")
        self.logger.info(f"Parsing complete. Models: {structure.model_count}, "
                         f"Atoms: {structure.atom_count}, Warnings: {len(structure.warnings)}")
        return structure
