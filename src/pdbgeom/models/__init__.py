#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Models package

Typed atomic model and the derived geometry value types.
"""

from .element import Element
from .residue import ResidueType, composition_class, residue_class
from .chain import SecondaryStructure, normalize_chain_id, DEFAULT_CHAIN_ID
from .atom import Atom
from .structure import Model, StructureFile, SecondaryStructureMap
from .geometry import (Bond, BackboneChain, RibbonSegment, ResidueSurfaceBlob,
                       SurfaceSphere, SurfaceStrut)

__all__ = [
    'Element', 'ResidueType', 'composition_class', 'residue_class', 'SecondaryStructure', 'normalize_chain_id',
    'DEFAULT_CHAIN_ID', 'Atom', 'Model', 'StructureFile', 'SecondaryStructureMap',
    'Bond', 'BackboneChain', 'RibbonSegment', 'ResidueSurfaceBlob', 'SurfaceSphere',
    'SurfaceStrut',
]
