#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PDB Common Utilities

Column layout of the supported PDB records, fixed-column field extraction and
the batching / cancellation helpers shared by the geometry engines.
"""

import threading
from typing import Iterator, Optional, Tuple

from ..errors import ComputationCancelled


# PDB column layout as (start, end) slices, 0-based and end-exclusive
PDB_COLUMNS = {
    "ATOM": {
        "atom_name": (12, 16),
        "alt_loc": (16, 17),
        "res_name": (17, 20),
        "chain_id": (21, 22),
        "res_seq": (22, 26),
        "x": (30, 38),
        "y": (38, 46),
        "z": (46, 54),
        "element": (76, 78),
    },
    "HELIX": {
        "init_chain_id": (19, 20),
        "init_res_seq": (21, 25),
        "end_chain_id": (31, 32),
        "end_res_seq": (33, 37),
    },
    "SHEET": {
        "init_chain_id": (21, 22),
        "init_res_seq": (22, 26),
        "end_chain_id": (32, 33),
        "end_res_seq": (33, 37),
    },
    "HEADER": {
        "classification": (10, 50),
        "id_code": (62, 66),
    },
}

# Shortest line that still holds every field a record type needs
MIN_RECORD_LENGTH = {
    "ATOM": 54,
    "HELIX": 37,
    "SHEET": 37,
}


def field(line: str, span: Tuple[int, int]) -> str:
    """
    Extract a fixed-column field and strip surrounding blanks.

    Args:
        line (str): Record line
        span (Tuple[int, int]): 0-based (start, end) slice

    Returns:
        str: Stripped field text, empty when the line is too short
    """
    start, end = span
    return line[start:end].strip()


def parse_int(text: str) -> Optional[int]:
    try:
        return int(text)
    except ValueError:
        return None


def parse_float(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None


def batched_range(total: int, batch_size: int) -> Iterator[Tuple[int, int]]:
    """
    Yield (start, end) bounds that cover ``range(total)`` in batches.

    Args:
        total (int): Number of items
        batch_size (int): Maximum items per batch (values below 1 mean one batch)

    Yields:
        Tuple[int, int]: Half-open batch bounds
    """
    if batch_size < 1:
        batch_size = max(total, 1)
    for start in range(0, total, batch_size):
        yield start, min(start + batch_size, total)


class CancellationToken:
    """
    Cooperative cancellation flag checked by the engines between batches.

    Attributes:
        reason (str): Message attached to the raised ComputationCancelled
    """
    def __init__(self):
        self._event = threading.Event()
        self.reason = "Computation cancelled"

    def cancel(self, reason: Optional[str] = None) -> None:
        if reason:
            self.reason = reason
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """
        Raise ComputationCancelled if ``cancel`` was called.

        Raises:
            ComputationCancelled: When the token has been cancelled
        """
        if self._event.is_set():
            raise ComputationCancelled(self.reason)


def check_cancelled(token: Optional[CancellationToken]) -> None:
    if token is not None:
        token.raise_if_cancelled()
