#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Distance Utilities Module

Handles distance-related calculations on atom coordinate tensors, including:
- Atom pair distance calculations
- Batched pair enumeration under a cutoff
"""

import torch
from typing import Iterator, Tuple

from .common import batched_range


def calculate_atom_pair_distances(coords1: torch.Tensor, coords2: torch.Tensor) -> torch.Tensor:
    """
    Calculate distances between all atom pairs from two sets of coordinates.

    Args:
        coords1 (torch.Tensor): First set of atom coordinates (shape: [num_atoms1, 3])
        coords2 (torch.Tensor): Second set of atom coordinates (shape: [num_atoms2, 3])

    Returns:
        torch.Tensor: Distance matrix between atom pairs (shape: [num_atoms1, num_atoms2])
    """
    expanded1 = coords1.unsqueeze(1)  # (N, 1, 3)
    expanded2 = coords2.unsqueeze(0)  # (1, M, 3)
    return torch.norm(expanded1 - expanded2, dim=2)  # (N, M)


def iter_pairs_within_cutoff(coords: torch.Tensor, cutoff: float,
                             batch_size: int = 256) -> Iterator[Tuple[torch.Tensor, torch.Tensor, torch.Tensor]]:
    """
    Enumerate unordered atom pairs (i < j) closer than or equal to a cutoff, one row batch at a time.

    Args:
        coords (torch.Tensor): Atom coordinates (shape: [N, 3])
        cutoff (float): Inclusive distance cutoff
        batch_size (int): Number of rows compared per batch

    Yields:
        Tuple[torch.Tensor, torch.Tensor, torch.Tensor]: Row indices, column indices and distances of the batch pairs
    """
    total = coords.shape[0]
    for start, end in batched_range(total, batch_size):
        distances = torch.cdist(coords[start:end], coords, compute_mode='donot_use_mm_for_euclid_dist')
        rows = torch.arange(start, end).unsqueeze(1)
        cols = torch.arange(total).unsqueeze(0)
        mask = (distances <= cutoff) & (cols > rows)
        local_rows, col_idx = torch.nonzero(mask, as_tuple=True)
        yield local_rows + start, col_idx, distances[local_rows, col_idx]

