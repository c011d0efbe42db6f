#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PDB Geometry Package

Parses Protein Data Bank structures and derives the geometry needed to draw
them as ball-and-stick, space-filling, ribbon or surface models.
"""

from .config import GeometryConfig
from .errors import PDBGeometryError, EmptyStructureError, ComputationCancelled, ConfigurationError
from .io.parser import PDBParser
from .io.writer import GeometryWriter
from .core.bonds import BondInferenceEngine
from .core.ribbon import BackboneCurveGenerator
from .core.relaxation import SpaceFillingSolver
from .core.surface import SurfaceApproximator
from .core.statistics import StructureStatistics
from .core.representations import derive_geometry, GeometryTask, GeometryResult
from .models.structure import Model, StructureFile
from .utils.logger import Logger
from .utils.common import CancellationToken

__all__ = [
    'GeometryConfig',
    'PDBGeometryError',
    'EmptyStructureError',
    'ComputationCancelled',
    'ConfigurationError',
    'PDBParser',
    'GeometryWriter',
    'BondInferenceEngine',
    'BackboneCurveGenerator',
    'SpaceFillingSolver',
    'SurfaceApproximator',
    'StructureStatistics',
    'derive_geometry',
    'GeometryTask',
    'GeometryResult',
    'Model',
    'StructureFile',
    'Logger',
    'CancellationToken',
]

__version__ = '1.0.0'
__description__ = 'PDB parsing and molecular display geometry derivation'
