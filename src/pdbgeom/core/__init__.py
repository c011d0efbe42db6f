#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Core package

Geometry engines deriving bonds, ribbons, relaxed spheres and surfaces.
"""

from .bonds import BondInferenceEngine
from .ribbon import BackboneCurveGenerator
from .relaxation import SpaceFillingSolver, SpatialGrid, relaxation_step
from .surface import SurfaceApproximator
from .statistics import StructureStatistics
from .representations import (BallAndStick, SpaceFilling, Ribbon, Surface, REPRESENTATIONS,
                              GeometryResult, GeometryTask, derive_geometry)

__all__ = [
    'BondInferenceEngine', 'BackboneCurveGenerator', 'SpaceFillingSolver', 'SpatialGrid',
    'relaxation_step', 'SurfaceApproximator', 'StructureStatistics', 'BallAndStick',
    'SpaceFilling', 'Ribbon', 'Surface', 'REPRESENTATIONS', 'GeometryResult', 'GeometryTask',
    'derive_geometry',
]
