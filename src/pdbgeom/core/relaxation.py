#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Space-Filling Relaxation Module

Iteratively pushes enlarged atom spheres apart or together so the
space-filling model neither gaps nor interpenetrates excessively.
"""

import math
from typing import Dict, Iterator, List, Optional, Tuple

import torch
from tqdm import tqdm

from ..config import GeometryConfig
from ..models.element import Element
from ..models.structure import Model
from ..utils.common import CancellationToken, check_cancelled
from ..utils.logger import Logger
from ..utils.vector_utils import random_unit_vectors

RADIUS_MULTIPLIERS: Dict[Element, float] = {
    Element.H: 0.9,
    Element.O: 1.05,
    Element.N: 1.05,
    Element.S: 1.1,
    Element.CO: 0.6,
}

Cell = Tuple[int, int, int]


class SpatialGrid:
    """
    Uniform hash grid over a snapshot of positions.

    Attributes:
        cell_size (float): Cell edge in Å
        cells (Dict[Cell, List[int]]): Atom indices per occupied cell
    """
    def __init__(self, positions: torch.Tensor, cell_size: float = 1.0):
        self.cell_size = cell_size
        self.cells: Dict[Cell, List[int]] = {}
        keys = torch.floor(positions / cell_size).to(torch.long).tolist()
        for index, key in enumerate(keys):
            self.cells.setdefault(tuple(key), []).append(index)

    def cell_of(self, position: torch.Tensor) -> Cell:
        return tuple(int(math.floor(float(c) / self.cell_size)) for c in position)

    def neighbours(self, cell: Cell) -> List[int]:
        """Atom indices in the 27 cells around and including ``cell``."""
        cx, cy, cz = cell
        found: List[int] = []
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for dz in (-1, 0, 1):
                    found.extend(self.cells.get((cx + dx, cy + dy, cz + dz), ()))
        return found

    def occupied(self) -> Iterator[Tuple[Cell, List[int]]]:
        """Occupied cells in sorted order."""
        for cell in sorted(self.cells):
            yield cell, self.cells[cell]

    def __len__(self) -> int:
        return len(self.cells)


def relaxation_step(positions: torch.Tensor, radii: torch.Tensor, overlap: float, adjust: float,
                    cell_size: float = 10.0, generator: Optional[torch.Generator] = None,
                    config: Optional[GeometryConfig] = None) -> torch.Tensor:
    """
    Apply one relaxation iteration.

    Every atom interacts with the atoms of its 27-cell neighbourhood.  The
    cell edge is widened to the longest attraction reach of the current radii
    so no interacting pair is ever more than one cell apart.  With
    ``ideal = (ri + rj) * overlap`` a pair repels below 0.98 ideal, is left
    alone inside the +-2% band and attracts up to 3x ideal.  Coincident pairs
    get a random separating nudge.  Each atom moves by the mean force of its
    interactions; all moves are computed from the input snapshot.

    Args:
        positions (torch.Tensor): Current positions (shape: [N, 3]); not modified
        radii (torch.Tensor): Scaled sphere radii (shape: [N])
        overlap (float): Overlap factor of this iteration
        adjust (float): Force scale of this iteration
        cell_size (float): Minimum grid cell edge in Å
        generator (Optional[torch.Generator]): Random source for degenerate pairs
        config (Optional[GeometryConfig]): Force constants

    Returns:
        torch.Tensor: Updated positions
    """
    config = config or GeometryConfig()
    if generator is None:
        generator = torch.Generator().manual_seed(config.seed)

    if radii.numel():
        reach = 2.0 * float(radii.max()) * overlap * config.attraction_range
        cell_size = max(cell_size, reach)
    grid = SpatialGrid(positions, cell_size)
    updated = positions.clone()
    band = config.tolerance_band

    for cell, members in grid.occupied():
        rows = torch.tensor(members, dtype=torch.long)
        cols = torch.tensor(grid.neighbours(cell), dtype=torch.long)

        diff = positions[rows].unsqueeze(1) - positions[cols].unsqueeze(0)  # (M, K, 3)
        distance = torch.norm(diff, dim=2)                                  # (M, K)
        r_i = radii[rows].unsqueeze(1)
        ideal = (r_i + radii[cols].unsqueeze(0)) * overlap
        not_self = rows.unsqueeze(1) != cols.unsqueeze(0)

        degenerate = not_self & (distance < config.degenerate_distance)
        valid = not_self & ~degenerate
        repel = valid & (distance < ideal * (1.0 - band))
        attract = valid & (distance >= ideal * (1.0 + band)) & (distance < ideal * config.attraction_range)

        safe_distance = torch.where(valid, distance, torch.ones_like(distance)).unsqueeze(2)
        direction = diff / safe_distance
        repulsion = (ideal - distance) / ideal * config.repulsion_strength * adjust * r_i
        attraction = (distance - ideal) / ideal * config.attraction_strength * adjust * r_i

        force = torch.zeros_like(diff)
        force = torch.where(repel.unsqueeze(2), direction * repulsion.unsqueeze(2), force)
        force = torch.where(attract.unsqueeze(2), -direction * attraction.unsqueeze(2), force)

        nudges = int(degenerate.sum().item())
        if nudges:
            force[degenerate] = random_unit_vectors(nudges, generator, positions.dtype) * config.degenerate_nudge

        count = (repel | attract | degenerate).sum(dim=1)
        total = force.sum(dim=1)
        moving = count > 0
        if bool(moving.any()):
            mean_force = total[moving] / count[moving].unsqueeze(1).to(positions.dtype)
            updated[rows[moving]] = positions[rows[moving]] + mean_force

    return updated


class SpaceFillingSolver:
    """
    Fixed-iteration relaxation of space-filling sphere positions.

    Attributes:
        config (GeometryConfig): Scale, schedule and force parameters
        logger (Logger): Logger instance
    """
    def __init__(self, config: Optional[GeometryConfig] = None, logger: Optional[Logger] = None):
        self.config = config or GeometryConfig()
        self.logger = logger or Logger()

    def sphere_radii(self, model: Model) -> torch.Tensor:
        """Display radius x sphere scale x element multiplier, per atom."""
        scale = self.config.sphere_scale
        return torch.tensor(
            [a.element.display_radius * scale * RADIUS_MULTIPLIERS.get(a.element, 1.0) for a in model.atoms],
            dtype=torch.float32,
        )

    def relax_positions(self, model: Model, token: Optional[CancellationToken] = None) -> torch.Tensor:
        """
        Relax a copy of the model coordinates.

        Args:
            model (Model): Source model; its coordinates are left untouched
            token (Optional[CancellationToken]): Checked between iterations

        Returns:
            torch.Tensor: Relaxed positions in Å (shape: [N, 3])
        """
        cfg = self.config
        positions = model.coordinates.clone()
        if model.atom_count == 0:
            return positions
        radii = self.sphere_radii(model)
        generator = torch.Generator().manual_seed(cfg.seed)

        for iteration in tqdm(range(cfg.relaxation_iterations), desc="Relaxation",
                              disable=not cfg.show_progress, leave=False):
            check_cancelled(token)
            adjust = 1.0 - iteration * cfg.adjust_decay
            overlap = cfg.overlap_start + iteration * cfg.overlap_step
            relaxed = relaxation_step(positions, radii, overlap, adjust, cfg.grid_cell_size, generator, cfg)
            shift = float(torch.norm(relaxed - positions, dim=1).max().item())
            self.logger.debug(f"Iteration {iteration + 1}: overlap={overlap:.2f}, max shift={shift:.4f} Å")
            positions = relaxed

        check_cancelled(token)
        return positions

    def relax(self, model: Model, token: Optional[CancellationToken] = None) -> Dict[int, Tuple[float, float, float]]:
        """
        Relaxed position override map for space-filling rendering.

        Args:
            model (Model): Source model
            token (Optional[CancellationToken]): Cancellation token

        Returns:
            Dict[int, Tuple[float, float, float]]: Atom index to relaxed position in Å
        """
        positions = self.relax_positions(model, token)
        overrides = {i: tuple(p) for i, p in enumerate(positions.tolist())}
        self.logger.info(f"Relaxed {len(overrides)} atom positions over {self.config.relaxation_iterations} iterations")
        return overrides
