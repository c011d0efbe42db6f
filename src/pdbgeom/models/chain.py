#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Chain and Secondary Structure Models

Defines chain identifiers and the per-residue secondary structure classes.
"""

from enum import Enum
from typing import Optional

DEFAULT_CHAIN_ID = "A"


def normalize_chain_id(raw: Optional[str]) -> str:
    """
    Trim a chain identifier, substituting the default chain for blanks.

    Args:
        raw (Optional[str]): Chain identifier column text

    Returns:
        str: Non-empty chain identifier
    """
    if raw is None:
        return DEFAULT_CHAIN_ID
    trimmed = raw.strip()
    return trimmed or DEFAULT_CHAIN_ID


class SecondaryStructure(Enum):
    """Per-residue structural class; LOOP is assigned to any uncovered residue."""
    HELIX = "helix"
    SHEET = "sheet"
    LOOP = "loop"

    @property
    def is_loop(self) -> bool:
        return self is SecondaryStructure.LOOP
