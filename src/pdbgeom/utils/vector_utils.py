#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Vector Utilities

NaN-free normalization and frame helpers for curve and relaxation math.
"""

import torch
from typing import Optional

EPSILON = 1e-6


def safe_normalize(vectors: torch.Tensor, fallback: Optional[torch.Tensor] = None) -> torch.Tensor:
    """
    Normalize vectors along the last dimension without producing NaN.

    Args:
        vectors (torch.Tensor): Vectors (shape: [..., 3])
        fallback (Optional[torch.Tensor]): Value used where a vector has zero length;
            defaults to the zero vector

    Returns:
        torch.Tensor: Unit vectors (or the fallback for degenerate inputs)
    """
    norms = torch.norm(vectors, dim=-1, keepdim=True)
    degenerate = norms < EPSILON
    unit = vectors / torch.where(degenerate, torch.ones_like(norms), norms)
    if fallback is None:
        fallback = torch.zeros_like(vectors)
    else:
        fallback = fallback.to(vectors.dtype).expand_as(vectors)
    return torch.where(degenerate, fallback, unit)


def frame_normals(tangents: torch.Tensor, up: torch.Tensor) -> torch.Tensor:
    """
    Compute per-sample normals from tangents and a fixed up-vector.

    ``right = normalize(tangent x up)`` and ``normal = normalize(right x tangent)``.
    A tangent parallel to ``up`` swaps in the x axis; a zero tangent yields ``up``.

    Args:
        tangents (torch.Tensor): Tangent vectors (shape: [N, 3])
        up (torch.Tensor): Global up-vector (shape: [3])

    Returns:
        torch.Tensor: Unit normals (shape: [N, 3])
    """
    up = up.to(tangents.dtype)
    ups = up.expand_as(tangents)
    unit_tangents = safe_normalize(tangents)
    zero_tangent = torch.norm(tangents, dim=-1, keepdim=True) < EPSILON

    right = torch.cross(unit_tangents, ups, dim=-1)
    parallel = torch.norm(right, dim=-1, keepdim=True) < EPSILON
    alternate = torch.tensor([1.0, 0.0, 0.0], dtype=tangents.dtype).expand_as(tangents)
    right = torch.where(parallel, torch.cross(unit_tangents, alternate, dim=-1), right)
    right = safe_normalize(right)

    normals = safe_normalize(torch.cross(right, unit_tangents, dim=-1), fallback=up)
    return torch.where(zero_tangent, ups, normals)


def random_unit_vectors(count: int, generator: torch.Generator, dtype=torch.float32) -> torch.Tensor:
    """
    Draw random unit vectors from a seeded generator.

    Args:
        count (int): Number of vectors
        generator (torch.Generator): Seeded random source
        dtype: Output dtype

    Returns:
        torch.Tensor: Unit vectors (shape: [count, 3])
    """
    samples = torch.rand(count, 3, generator=generator, dtype=dtype) * 2.0 - 1.0
    return safe_normalize(samples, fallback=torch.tensor([1.0, 0.0, 0.0], dtype=dtype))
