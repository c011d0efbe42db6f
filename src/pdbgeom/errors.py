#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Error Types

Exceptions raised by the parser and the geometry engines.
"""

from typing import List, Optional


class PDBGeometryError(Exception):
    """Base class for all pdbgeom errors."""


class EmptyStructureError(PDBGeometryError):
    """
    Raised when a structure text contains no usable atom records.

    Attributes:
        diagnostics (List[str]): Line diagnostics collected while parsing
        source (Optional[str]): Name of the parsed source, if known
    """
    def __init__(self, message: str = "No atoms found in structure",
                 diagnostics: Optional[List[str]] = None, source: Optional[str] = None):
        super().__init__(message)
        self.diagnostics = list(diagnostics or [])
        self.source = source


class ComputationCancelled(PDBGeometryError):
    """Raised at a batch boundary after a caller requested cancellation."""


class ConfigurationError(PDBGeometryError):
    """Raised for unknown configuration keys, values or display modes."""
