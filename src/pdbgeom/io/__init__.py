#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
IO package

PDB record tokenizing, structure assembly and geometry export.
"""

from .records import parse_records, tokenize_line, parse_atom_record, resolve_element
from .parser import PDBParser, assemble_models
from .writer import GeometryWriter

__all__ = ['parse_records', 'tokenize_line', 'parse_atom_record', 'resolve_element',
           'PDBParser', 'assemble_models', 'GeometryWriter']
