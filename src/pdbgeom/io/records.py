#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PDB Record Parser

Tokenizes fixed-column PDB lines into typed records.  Malformed lines raise
MalformedRecord, which ``parse_records`` turns into a line-numbered
diagnostic before moving on to the next line.
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple, Union

from ..models.chain import SecondaryStructure, normalize_chain_id
from ..models.element import Element, MULTI_LETTER_SYMBOLS
from ..utils.common import PDB_COLUMNS, MIN_RECORD_LENGTH, field as column, parse_float, parse_int

# Supported record prefixes, matched against the start of each line
RECORD_PREFIXES = ("HETATM", "ATOM", "HELIX", "SHEET", "MODEL", "ENDMDL", "TER",
                   "HEADER", "TITLE", "AUTHOR", "REMARK")


class MalformedRecord(ValueError):
    """A record line that is too short or has an unparsable numeric field."""


@dataclass(frozen=True)
class AtomRecord:
    line_number: int
    record_type: str
    atom_name: str
    res_name: str
    chain_id: str
    res_seq: int
    x: float
    y: float
    z: float
    element: Element

    @property
    def position(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class SecondaryStructureRecord:
    """HELIX or SHEET range; ``end_chain_id`` is informational only."""
    line_number: int
    structure: SecondaryStructure
    chain_id: str
    start: int
    end_chain_id: str
    end: int


@dataclass(frozen=True)
class ModelBoundary:
    line_number: int
    opens: bool
    serial: Optional[int] = None


@dataclass(frozen=True)
class ChainTerminator:
    line_number: int


StreamRecord = Union[AtomRecord, ModelBoundary, ChainTerminator]


@dataclass
class ParsedRecords:
    """
    Output of one pass over a structure text.

    Attributes:
        stream (List[StreamRecord]): Atom, MODEL/ENDMDL and TER records in file order
        helices (List[SecondaryStructureRecord]): HELIX records
        sheets (List[SecondaryStructureRecord]): SHEET records
        identifier (str): HEADER id code
        classification (str): HEADER classification
        title (str): Joined TITLE text
        authors (str): Joined AUTHOR text
        resolution (Optional[float]): REMARK 2 resolution in Å
        diagnostics (List[str]): Skipped-line messages
        unknown_elements (int): Atom records resolved to Element.UNKNOWN
        line_count (int): Number of lines read
    """
    stream: List[StreamRecord] = field(default_factory=list)
    helices: List[SecondaryStructureRecord] = field(default_factory=list)
    sheets: List[SecondaryStructureRecord] = field(default_factory=list)
    identifier: str = ""
    classification: str = ""
    title: str = ""
    authors: str = ""
    resolution: Optional[float] = None
    diagnostics: List[str] = field(default_factory=list)
    unknown_elements: int = 0
    line_count: int = 0

    @property
    def atoms(self) -> List[AtomRecord]:
        return [r for r in self.stream if isinstance(r, AtomRecord)]


def tokenize_line(line: str) -> Optional[str]:
    """
    Identify the record type of a line by its fixed prefix.

    Args:
        line (str): Raw line

    Returns:
        Optional[str]: Record keyword (HETATM is reported as-is), or None for unsupported records
    """
    for prefix in RECORD_PREFIXES:
        if line.startswith(prefix):
            return prefix
    return None


def resolve_element(element_field: str, raw_atom_name: str) -> Element:
    """
    Resolve the element of an atom record.

    The explicit element columns win.  When they are blank the element is
    inferred from the atom name: a name starting in column 13 whose first two
    letters form a known metal or halogen symbol is taken as that element,
    otherwise the first alphabetic character is used.

    Args:
        element_field (str): Columns 77-78
        raw_atom_name (str): Unstripped columns 13-16

    Returns:
        Element: Resolved element, Element.UNKNOWN when not in the table
    """
    symbol = element_field.strip()
    if symbol:
        return Element.from_symbol(symbol)

    if not raw_atom_name.strip():
        return Element.UNKNOWN

    if raw_atom_name[:1].isalpha():
        pair = raw_atom_name[:2].upper()
        if pair in MULTI_LETTER_SYMBOLS:
            return Element.from_symbol(pair)

    for char in raw_atom_name:
        if char.isalpha():
            return Element.from_symbol(char)
    return Element.UNKNOWN


def _require_length(line: str, record: str, line_number: int) -> None:
    minimum = MIN_RECORD_LENGTH[record]
    if len(line) < minimum:
        raise MalformedRecord(f"Line {line_number}: {record} record too short "
                              f"({len(line)} < {minimum} characters)")


def _require_int(text: str, name: str, line_number: int) -> int:
    value = parse_int(text)
    if value is None:
        raise MalformedRecord(f"Line {line_number}: invalid {name} '{text}'")
    return value


def parse_atom_record(line: str, line_number: int = 0) -> AtomRecord:
    """
    Parse an ATOM/HETATM line.

    Args:
        line (str): Record line without trailing newline
        line_number (int): 1-based line number for diagnostics

    Returns:
        AtomRecord: Parsed record

    Raises:
        MalformedRecord: If the line is shorter than 54 characters or a residue
            number / coordinate does not parse or a coordinate is not finite
    """
    _require_length(line, "ATOM", line_number)
    cols = PDB_COLUMNS["ATOM"]

    record_type = "HETATM" if line.startswith("HETATM") else "ATOM"
    raw_name = line[cols["atom_name"][0]:cols["atom_name"][1]]
    res_seq = _require_int(column(line, cols["res_seq"]), "residue number", line_number)

    coords = []
    for axis in ("x", "y", "z"):
        text = column(line, cols[axis])
        value = parse_float(text)
        if value is None or not math.isfinite(value):
            raise MalformedRecord(f"Line {line_number}: invalid {axis} coordinate '{text}'")
        coords.append(value)

    element = resolve_element(column(line, cols["element"]), raw_name)
    return AtomRecord(
        line_number=line_number,
        record_type=record_type,
        atom_name=raw_name.strip(),
        res_name=column(line, cols["res_name"]),
        chain_id=normalize_chain_id(column(line, cols["chain_id"])),
        res_seq=res_seq,
        x=coords[0],
        y=coords[1],
        z=coords[2],
        element=element,
    )


def _parse_range(line: str, record: str, structure: SecondaryStructure,
                 line_number: int) -> SecondaryStructureRecord:
    _require_length(line, record, line_number)
    cols = PDB_COLUMNS[record]
    return SecondaryStructureRecord(
        line_number=line_number,
        structure=structure,
        chain_id=normalize_chain_id(column(line, cols["init_chain_id"])),
        start=_require_int(column(line, cols["init_res_seq"]), "initial residue", line_number),
        end_chain_id=normalize_chain_id(column(line, cols["end_chain_id"])),
        end=_require_int(column(line, cols["end_res_seq"]), "terminal residue", line_number),
    )


def parse_helix_record(line: str, line_number: int = 0) -> SecondaryStructureRecord:
    """
    Parse a HELIX line into a residue range.

    Args:
        line (str): Record line
        line_number (int): 1-based line number for diagnostics

    Returns:
        SecondaryStructureRecord: Helix range keyed by its initial chain

    Raises:
        MalformedRecord: If the line is too short or a residue number does not parse
    """
    return _parse_range(line, "HELIX", SecondaryStructure.HELIX, line_number)


def parse_sheet_record(line: str, line_number: int = 0) -> SecondaryStructureRecord:
    """Parse a SHEET strand line; same contract as ``parse_helix_record``."""
    return _parse_range(line, "SHEET", SecondaryStructure.SHEET, line_number)


def _parse_resolution(line: str) -> Optional[float]:
    marker = "RESOLUTION."
    position = line.find(marker)
    if position < 0:
        return None
    tokens = line[position + len(marker):].split()
    return parse_float(tokens[0]) if tokens else None


def _continuation_text(line: str) -> str:
    return line[10:].strip()


def parse_records(lines: Iterable[str]) -> ParsedRecords:
    """
    Tokenize every line of a structure text.

    Args:
        lines (Iterable[str]): Text lines (trailing newlines are stripped)

    Returns:
        ParsedRecords: Flat record bag plus the chronological atom/model stream
    """
    parsed = ParsedRecords()
    title_parts: List[str] = []
    author_parts: List[str] = []

    for line_number, raw in enumerate(lines, start=1):
        parsed.line_count = line_number
        line = raw.rstrip("\r\n")
        record = tokenize_line(line)
        if record is None:
            continue

        try:
            if record in ("ATOM", "HETATM"):
                atom = parse_atom_record(line, line_number)
                if not atom.element.is_known:
                    parsed.unknown_elements += 1
                parsed.stream.append(atom)
            elif record == "HELIX":
                parsed.helices.append(parse_helix_record(line, line_number))
            elif record == "SHEET":
                parsed.sheets.append(parse_sheet_record(line, line_number))
            elif record == "MODEL":
                parsed.stream.append(ModelBoundary(line_number, True, parse_int(line[6:].strip())))
            elif record == "ENDMDL":
                parsed.stream.append(ModelBoundary(line_number, False))
            elif record == "TER":
                parsed.stream.append(ChainTerminator(line_number))
            elif record == "HEADER":
                cols = PDB_COLUMNS["HEADER"]
                parsed.classification = column(line, cols["classification"])
                parsed.identifier = column(line, cols["id_code"])
            elif record == "TITLE":
                title_parts.append(_continuation_text(line))
            elif record == "AUTHOR":
                author_parts.append(_continuation_text(line))
            elif record == "REMARK" and line[6:10].strip() == "2":
                resolution = _parse_resolution(line)
                if resolution is not None:
                    parsed.resolution = resolution
        except MalformedRecord as e:
            parsed.diagnostics.append(str(e))

    parsed.title = " ".join(part for part in title_parts if part)
    parsed.authors = " ".join(part for part in author_parts if part)
    return parsed
