#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Geometry Configuration

Tunable constants of the parser and the geometry engines, loadable from a
dictionary, a JSON string or a JSON file.
"""

import json
import os
from typing import Any, Dict, Optional, Union

from .errors import ConfigurationError


DEFAULT_PARAMETERS: Dict[str, Any] = {
    # Parsing
    'coordinate_scale': 1.0,
    'render_scale': 0.1,
    'duplicate_oxygen_tolerance': 0.001,
    'max_atoms': None,

    # Bond inference
    'bond_threshold': 2.2,
    'long_range_threshold': 3.0,
    'generous_bond_threshold': 2.5,
    'pair_thresholds': {
        'C-C': 1.8,
        'C-N': 1.8,
        'C-O': 1.8,
        'H-N': 2.0,
        'H-O': 2.0,
        'C-S': 2.0,
    },
    'underbonded_ratio': 0.5,
    'simple_bond_atom_limit': 100,

    # Backbone curve
    'backbone_atom_name': 'CA',
    'carbon_walk_max_step': 3.0,
    'smoothing_iterations': 3,
    'spacing_factors': {'helix': 1.2, 'sheet': 1.1, 'loop': 1.05},
    'spline_tension': 0.2,
    'spline_resolution': 8,
    'min_run_length': 5,
    'transition_window': 3,
    'helix_min_samples': 8,
    'up_vector': [0.0, 1.0, 0.0],

    # Space-filling relaxation
    'relaxation_iterations': 6,
    'sphere_scale': 4.0,
    'overlap_start': 0.82,
    'overlap_step': 0.02,
    'adjust_decay': 0.15,
    'grid_cell_size': 10.0,
    'repulsion_strength': 0.8,
    'attraction_strength': 0.4,
    'tolerance_band': 0.02,
    'attraction_range': 3.0,
    'degenerate_distance': 0.01,
    'degenerate_nudge': 0.1,

    # Surface
    'surface_sphere_scale': 1.6,
    'surface_single_scale': 2.0,
    'strut_distance': 2.5,
    'strut_radius': 0.45,
    'strut_length_factor': 0.95,
    'match_tolerance': 0.05,
    'placeholder_radius': 0.5,

    # Execution
    'batch_size': 256,
    'seed': 0,
    'show_progress': False,
}


class GeometryConfig:
    """
    Container for geometry parameters.

    Every key of ``DEFAULT_PARAMETERS`` is exposed as an attribute.  Unknown keys
    are rejected so that typos in JSON files surface immediately.
    """
    def __init__(self, **overrides: Any):
        values = json.loads(json.dumps(DEFAULT_PARAMETERS))
        for key, value in overrides.items():
            if key not in values:
                raise ConfigurationError(f"Unknown configuration key: {key}")
            if isinstance(values[key], dict) and isinstance(value, dict):
                values[key].update(value)
            else:
                values[key] = value
        self._values = values
        self._validate()

    def __getattr__(self, name: str) -> Any:
        values = self.__dict__.get('_values')
        if values is not None and name in values:
            return values[name]
        raise AttributeError(name)

    def _validate(self) -> None:
        positive = ['bond_threshold', 'long_range_threshold', 'grid_cell_size',
                    'sphere_scale', 'render_scale', 'spline_resolution']
        for key in positive:
            if self._values[key] is None or self._values[key] <= 0:
                raise ConfigurationError(f"'{key}' must be positive, got {self._values[key]}")
        if self._values['max_atoms'] is not None and self._values['max_atoms'] < 1:
            raise ConfigurationError("'max_atoms' must be at least 1")
        if len(self._values['up_vector']) != 3:
            raise ConfigurationError("'up_vector' must have three components")

    def pair_threshold(self, symbol1: str, symbol2: str) -> Optional[float]:
        """
        Look up the element-pair specific bond threshold.

        Args:
            symbol1 (str): First element symbol
            symbol2 (str): Second element symbol

        Returns:
            Optional[float]: Threshold in Å, or None when the pair is not recognized
        """
        key = '-'.join(sorted((symbol1.upper(), symbol2.upper())))
        return self._values['pair_thresholds'].get(key)

    def replace(self, **overrides: Any) -> 'GeometryConfig':
        merged = self.to_dict()
        merged.update(overrides)
        return GeometryConfig(**merged)

    def to_dict(self) -> Dict[str, Any]:
        return json.loads(json.dumps(self._values))

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'GeometryConfig':
        return cls(**(data or {}))

    @classmethod
    def load(cls, source: Union[str, Dict[str, Any], None]) -> 'GeometryConfig':
        """
        Build a configuration from a dict, a JSON string or a JSON file path.

        Args:
            source: Configuration source; None yields the defaults

        Returns:
            GeometryConfig: Loaded configuration

        Raises:
            ConfigurationError: If the source is not valid JSON or has unknown keys
        """
        if source is None:
            return cls()
        if isinstance(source, dict):
            return cls.from_dict(source)
        if os.path.isfile(source):
            with open(source, 'r', encoding='utf-8') as f:
                text = f.read()
        else:
            text = source
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON configuration: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    def __repr__(self) -> str:
        return f"GeometryConfig({len(self._values)} parameters)"
