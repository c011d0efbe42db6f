"""
Shared fixtures: fixed-column PDB line builders and small synthetic structures.
"""

import math

import pytest

from pdbgeom.config import GeometryConfig
from pdbgeom.io.parser import PDBParser
from pdbgeom.models.atom import Atom
from pdbgeom.models.element import Element
from pdbgeom.models.structure import Model
from pdbgeom.utils.logger import Logger


def atom_line(serial, name, res_name, chain, res_seq, x, y, z, element="", record="ATOM"):
    """Build an ATOM/HETATM line with standard PDB column layout."""
    padded = name if len(name) == 4 else f" {name:<3}"
    return (f"{record:<6}{serial:>5} {padded}{' '}{res_name:>3} {chain}{res_seq:>4}{' '}   "
            f"{x:8.3f}{y:8.3f}{z:8.3f}{1.0:6.2f}{0.0:6.2f}          {element:>2}")


def helix_line(chain, start, end, serial=1):
    return f"HELIX  {serial:>3} {serial:>3} ALA {chain} {start:>4}  ALA {chain} {end:>4}  1"


def sheet_line(chain, start, end, strand=1):
    return f"SHEET  {strand:>3} {'S1':>3}{2:>2} ALA {chain}{start:>4}  ALA {chain}{end:>4}  0"


def helix_ca_lines(chain="A", first=10, last=20, start_serial=1):
    """CA atoms on an ideal alpha helix (radius 2.3 Å, rise 1.5 Å, 100 degrees per residue)."""
    lines = []
    for offset, res_seq in enumerate(range(first, last + 1)):
        angle = math.radians(100.0 * offset)
        lines.append(atom_line(start_serial + offset, "CA", "ALA", chain, res_seq,
                               2.3 * math.cos(angle), 2.3 * math.sin(angle), 1.5 * offset, "C"))
    return lines


@pytest.fixture
def make_atom_line():
    return atom_line


@pytest.fixture
def make_helix_line():
    return helix_line


@pytest.fixture
def make_sheet_line():
    return sheet_line


@pytest.fixture
def make_helix_ca_lines():
    return helix_ca_lines


@pytest.fixture
def config():
    return GeometryConfig()


@pytest.fixture
def logger():
    return Logger(capture=True, use_colors=False)


@pytest.fixture
def parser(config, logger):
    return PDBParser(config, logger)


@pytest.fixture
def helix_pdb():
    """Chain A residues 10-20 with CA atoms and one HELIX record covering them."""
    lines = [f"HEADER    {'STRUCTURAL PROTEIN':<40}01-JAN-00   1HLX",
             helix_line("A", 10, 20)]
    lines += helix_ca_lines("A", 10, 20)
    lines += ["TER", "END"]
    return "\n".join(lines) + "\n"


@pytest.fixture
def two_carbon_pdb():
    return "\n".join([
        atom_line(1, "C1", "LIG", "A", 1, 0.0, 0.0, 0.0, "C", record="HETATM"),
        atom_line(2, "C2", "LIG", "A", 1, 1.4, 0.0, 0.0, "C", record="HETATM"),
    ]) + "\n"


@pytest.fixture
def dipeptide_pdb():
    """Gly-Asp fragment with realistic backbone geometry."""
    rows = [
        (1, "N", "GLY", 1, -1.458, 0.000, 0.000, "N"),
        (2, "CA", "GLY", 1, 0.000, 0.000, 0.000, "C"),
        (3, "C", "GLY", 1, 0.551, 1.420, 0.000, "C"),
        (4, "O", "GLY", 1, -0.190, 2.400, 0.000, "O"),
        (5, "N", "ASP", 2, 1.880, 1.530, 0.000, "N"),
        (6, "CA", "ASP", 2, 2.520, 2.840, 0.000, "C"),
        (7, "C", "ASP", 2, 4.030, 2.690, 0.000, "C"),
        (8, "O", "ASP", 2, 4.570, 1.580, 0.000, "O"),
        (9, "CB", "ASP", 2, 2.100, 3.600, 1.250, "C"),
    ]
    return "\n".join(atom_line(s, n, r, "A", q, x, y, z, e) for s, n, r, q, x, y, z, e in rows) + "\nEND\n"


def model_from(specs, **atom_fields):
    """Build a Model from (symbol, (x, y, z)) pairs without going through text."""
    atoms = [Atom(index=i, element=Element.from_symbol(symbol), position=tuple(float(c) for c in position),
                  **atom_fields)
             for i, (symbol, position) in enumerate(specs)]
    return Model(atoms)


@pytest.fixture
def make_model():
    return model_from
