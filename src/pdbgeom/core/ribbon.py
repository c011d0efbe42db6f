#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Backbone Curve Module

Traces per-chain backbones, smooths them into cardinal-spline curves and cuts
the curves into ribbon segments by secondary structure.
"""

from collections import OrderedDict
from typing import Dict, List, Optional, Sequence, Tuple

import torch
from tqdm import tqdm

from ..config import GeometryConfig
from ..models.chain import DEFAULT_CHAIN_ID, SecondaryStructure
from ..models.element import Element
from ..models.geometry import BackboneChain, RibbonSegment
from ..models.structure import Model
from ..utils.common import CancellationToken, check_cancelled
from ..utils.logger import Logger
from ..utils.vector_utils import frame_normals, safe_normalize


def extract_backbone_chains(model: Model, atom_name: str = "CA") -> List[BackboneChain]:
    """
    Collect one backbone atom per residue for every chain.

    Args:
        model (Model): Source model
        atom_name (str): Backbone atom name

    Returns:
        List[BackboneChain]: Chains in first-appearance order, residues ascending;
        chains with fewer than two backbone atoms are dropped
    """
    per_chain: Dict[str, Dict[int, int]] = OrderedDict()
    for atom in model.atoms:
        if atom.atom_name != atom_name or atom.element is not Element.C or atom.res_seq is None:
            continue
        residues = per_chain.setdefault(atom.chain_id, {})
        residues.setdefault(atom.res_seq, atom.index)

    chains = []
    for chain_id, residues in per_chain.items():
        if len(residues) < 2:
            continue
        numbers = sorted(residues)
        indices = [residues[n] for n in numbers]
        atoms = [model.atoms[i] for i in indices]
        chains.append(BackboneChain(
            chain_id=chain_id,
            positions=model.coordinates[torch.tensor(indices, dtype=torch.long)],
            residue_numbers=numbers,
            residue_names=[a.res_name for a in atoms],
            structures=[model.secondary_structure.lookup(chain_id, n) for n in numbers],
            atom_indices=indices,
        ))
    return chains


def carbon_walk_chains(model: Model, max_step: float = 3.0) -> List[BackboneChain]:
    """
    Order carbon atoms by a greedy nearest-unvisited walk.

    The walk starts at the first carbon and repeatedly jumps to the closest
    unvisited carbon within ``max_step``.  When none is in range the current
    path ends and a new one starts from the lowest remaining atom index.
    Every path of two or more atoms becomes its own all-loop chain.

    Args:
        model (Model): Source model
        max_step (float): Largest jump in Å that continues a path

    Returns:
        List[BackboneChain]: Paths with atom indices standing in for residue numbers
    """
    carbons = [atom.index for atom in model.atoms if atom.element is Element.C]
    if len(carbons) < 2:
        return []
    coords = model.coordinates[torch.tensor(carbons, dtype=torch.long)]
    visited = torch.zeros(len(carbons), dtype=torch.bool)

    paths: List[List[int]] = []
    current = 0
    path = [0]
    visited[0] = True
    while not bool(visited.all()):
        distances = torch.norm(coords - coords[current], dim=1)
        distances[visited] = float('inf')
        nearest = int(torch.argmin(distances).item())
        if float(distances[nearest].item()) <= max_step:
            current = nearest
        else:
            paths.append(path)
            current = int(torch.nonzero(~visited)[0].item())
            path = []
        path.append(current)
        visited[current] = True
    paths.append(path)

    chains = []
    for path in paths:
        if len(path) < 2:
            continue
        indices = [carbons[p] for p in path]
        chains.append(BackboneChain(
            chain_id=DEFAULT_CHAIN_ID,
            positions=coords[torch.tensor(path, dtype=torch.long)],
            residue_numbers=list(indices),
            residue_names=[model.atoms[i].res_name for i in indices],
            structures=[SecondaryStructure.LOOP] * len(indices),
            atom_indices=indices,
        ))
    return chains


def laplacian_smooth(points: torch.Tensor, iterations: int = 3) -> torch.Tensor:
    """
    Endpoint-preserving Laplacian smoothing with weights 0.25 / 0.5 / 0.25.

    Args:
        points (torch.Tensor): Curve points (shape: [N, 3]); not modified
        iterations (int): Number of passes

    Returns:
        torch.Tensor: Smoothed copy
    """
    smoothed = points.clone()
    if smoothed.shape[0] < 3:
        return smoothed
    for _ in range(iterations):
        updated = smoothed.clone()
        updated[1:-1] = 0.25 * smoothed[:-2] + 0.5 * smoothed[1:-1] + 0.25 * smoothed[2:]
        smoothed = updated
    return smoothed


def respace_points(points: torch.Tensor, structures: Sequence[SecondaryStructure],
                   factors: Optional[Dict[str, float]] = None) -> torch.Tensor:
    """
    Push each point away from its predecessor by a structure-dependent factor.

    Point ``i`` becomes ``p[i-1] + dir(p[i-1] -> p[i]) * |p[i] - p[i-1]| * factor``,
    measured on the input points; the first point is unchanged.

    Args:
        points (torch.Tensor): Smoothed points (shape: [N, 3])
        structures (Sequence[SecondaryStructure]): Structure per point
        factors (Optional[Dict[str, float]]): Multiplier per structure value

    Returns:
        torch.Tensor: Re-spaced copy
    """
    factors = factors or {'helix': 1.2, 'sheet': 1.1, 'loop': 1.05}
    spaced = points.clone()
    if points.shape[0] < 2:
        return spaced
    deltas = points[1:] - points[:-1]
    lengths = torch.norm(deltas, dim=1, keepdim=True)
    scale = torch.tensor([factors.get(s.value, 1.0) for s in structures[1:]],
                         dtype=points.dtype).unsqueeze(1)
    spaced[1:] = points[:-1] + safe_normalize(deltas) * lengths * scale
    return spaced


def _spline_basis(t: torch.Tensor, tension: float) -> torch.Tensor:
    t2 = t * t
    t3 = t2 * t
    return torch.stack([
        -tension * t3 + 2 * tension * t2 - tension * t,
        (2 - tension) * t3 + (tension - 3) * t2 + 1,
        (tension - 2) * t3 + (3 - 2 * tension) * t2 + tension * t,
        tension * t3 - tension * t2,
    ], dim=1)


def cardinal_spline(points: torch.Tensor, tension: float = 0.2, resolution: int = 8,
                    up: Optional[torch.Tensor] = None) -> Tuple[torch.Tensor, torch.Tensor, List[int]]:
    """
    Sample a cardinal spline through the points with up-vector based normals.

    Each source segment contributes ``resolution`` samples and the final point
    is appended, giving ``(N - 1) * resolution + 1`` samples.  Missing end
    controls are the first point itself and the mirrored last point.

    Args:
        points (torch.Tensor): Control points (shape: [N, 3]), N >= 2
        tension (float): Cardinal tension
        resolution (int): Samples per source segment
        up (Optional[torch.Tensor]): Global up-vector, defaults to +Y

    Returns:
        Tuple[torch.Tensor, torch.Tensor, List[int]]: Samples, unit normals and the
        source point index of every sample
    """
    if up is None:
        up = torch.tensor([0.0, 1.0, 0.0], dtype=points.dtype)
    count = points.shape[0]
    if count < 2:
        return points.clone(), up.expand_as(points).clone(), list(range(count))

    p1 = points[:-1]
    p2 = points[1:]
    p0 = torch.cat([points[:1], points[:-2]], dim=0)
    mirrored = (2 * points[-1] - points[-2]).unsqueeze(0)
    p3 = torch.cat([points[2:], mirrored], dim=0)

    t = torch.arange(resolution, dtype=points.dtype) / resolution
    basis = _spline_basis(t, tension)                      # (R, 4)
    controls = torch.stack([p0, p1, p2, p3], dim=1)        # (S, 4, 3)
    samples = torch.einsum('rk,skd->srd', basis, controls)  # (S, R, 3)

    tangents = torch.empty_like(samples)
    tangents[:, :-1] = samples[:, 1:] - samples[:, :-1]
    tangents[:-1, -1] = p2[:-1] - samples[:-1, -1]
    tangents[-1, -1] = samples[-1, -1] - p1[-1]

    segments = samples.shape[0]
    curve = torch.cat([samples.reshape(-1, 3), points[-1:]], dim=0)
    last_tangent = (points[-1] - points[-2]).unsqueeze(0)
    all_tangents = torch.cat([tangents.reshape(-1, 3), last_tangent], dim=0)
    normals = frame_normals(all_tangents, up)

    sources = torch.arange(segments).repeat_interleave(resolution).tolist() + [count - 1]
    return curve, normals, sources


def _runs(structures: Sequence[SecondaryStructure]) -> List[List]:
    runs: List[List] = []
    for structure in structures:
        if runs and runs[-1][0] is structure:
            runs[-1][1] += 1
        else:
            runs.append([structure, 1])
    return runs


def merge_short_runs(structures: Sequence[SecondaryStructure], min_length: int = 5) -> List[SecondaryStructure]:
    """
    Absorb per-residue structure runs shorter than ``min_length`` into a neighbour.

    The first short run that has a longer neighbouring run takes that
    neighbour's structure; a non-loop neighbour is preferred, then the longer
    one, then the preceding one.  This repeats until no short run has a longer
    neighbour.

    Args:
        structures (Sequence[SecondaryStructure]): Structure per residue
        min_length (int): Shortest run kept as is

    Returns:
        List[SecondaryStructure]: Merged structure per residue
    """
    runs = _runs(structures)
    merged = True
    while merged and len(runs) > 1:
        merged = False
        for position, (structure, length) in enumerate(runs):
            if length >= min_length:
                continue
            neighbours = []
            if position > 0:
                neighbours.append((position - 1, 1))
            if position < len(runs) - 1:
                neighbours.append((position + 1, 0))
            neighbours = [(p, before) for p, before in neighbours if runs[p][1] > length]
            if not neighbours:
                continue
            target, _ = max(neighbours, key=lambda n: (not runs[n[0]][0].is_loop, runs[n[0]][1], n[1]))
            runs[position][0] = runs[target][0]
            runs = _runs([s for s, n in runs for _ in range(n)])
            merged = True
            break

    return [structure for structure, length in runs for _ in range(length)]


def segment_by_structure(points: torch.Tensor, normals: torch.Tensor,
                         structures: Sequence[SecondaryStructure], residue_numbers: Sequence[int],
                         chain_id: str = DEFAULT_CHAIN_ID, window: int = 3,
                         helix_min_samples: int = 8) -> List[RibbonSegment]:
    """
    Cut a dense curve into runs of one secondary structure.

    A structure change only closes the current segment after ``window``
    consecutive differing samples; those samples stay in the closing segment
    and the next segment starts from the last two of them, so adjacent
    segments share one sample.

    Args:
        points (torch.Tensor): Curve samples (shape: [M, 3])
        normals (torch.Tensor): Sample normals (shape: [M, 3])
        structures (Sequence[SecondaryStructure]): Structure per sample
        residue_numbers (Sequence[int]): Source residue per sample
        chain_id (str): Owning chain
        window (int): Transition length in samples
        helix_min_samples (int): Helix segments below this size are flagged simplified

    Returns:
        List[RibbonSegment]: Segments in curve order
    """
    if points.shape[0] == 0:
        return []

    spans: List[Tuple[SecondaryStructure, List[int]]] = []
    current = [0]
    current_structure = structures[0]
    transition = 0
    for i in range(1, points.shape[0]):
        current.append(i)
        if structures[i] is current_structure:
            transition = 0
            continue
        transition += 1
        if transition >= window:
            spans.append((current_structure, current))
            current = [i - 1, i]
            current_structure = structures[i]
            transition = 0
    spans.append((current_structure, current))

    segments = []
    for structure, indices in spans:
        index = torch.tensor(indices, dtype=torch.long)
        segments.append(RibbonSegment(
            chain_id=chain_id,
            structure=structure,
            points=points[index],
            normals=normals[index],
            residue_numbers=[residue_numbers[i] for i in indices],
            simplified=structure is SecondaryStructure.HELIX and len(indices) < helix_min_samples,
        ))
    return segments


class BackboneCurveGenerator:
    """
    Ribbon geometry builder.

    Attributes:
        config (GeometryConfig): Smoothing, spline and segmentation parameters
        logger (Logger): Logger instance
    """
    def __init__(self, config: Optional[GeometryConfig] = None, logger: Optional[Logger] = None):
        self.config = config or GeometryConfig()
        self.logger = logger or Logger()

    def backbone_chains(self, model: Model) -> List[BackboneChain]:
        chains: List[BackboneChain] = []
        if model.has_residue_metadata:
            chains = extract_backbone_chains(model, self.config.backbone_atom_name)
        if not chains:
            self.logger.debug("No per-residue backbone available, falling back to a carbon walk")
            chains = carbon_walk_chains(model, self.config.carbon_walk_max_step)
        return chains

    def chain_segments(self, chain: BackboneChain) -> List[RibbonSegment]:
        """
        Run the smoothing pipeline on one chain.

        Args:
            chain (BackboneChain): Backbone trace with at least two points

        Returns:
            List[RibbonSegment]: Segments of this chain
        """
        cfg = self.config
        structures = merge_short_runs(chain.structures, cfg.min_run_length)
        smoothed = laplacian_smooth(chain.positions, cfg.smoothing_iterations)
        spaced = respace_points(smoothed, structures, cfg.spacing_factors)
        up = torch.tensor(cfg.up_vector, dtype=spaced.dtype)
        curve, normals, sources = cardinal_spline(spaced, cfg.spline_tension, cfg.spline_resolution, up)
        return segment_by_structure(
            curve, normals,
            [structures[s] for s in sources],
            [chain.residue_numbers[s] for s in sources],
            chain.chain_id, cfg.transition_window, cfg.helix_min_samples,
        )

    def generate(self, model: Model, token: Optional[CancellationToken] = None) -> List[RibbonSegment]:
        """
        Build ribbon segments for every chain of a model.

        Args:
            model (Model): Source model
            token (Optional[CancellationToken]): Checked between chains

        Returns:
            List[RibbonSegment]: Segments of all chains, chain by chain
        """
        chains = self.backbone_chains(model)
        segments: List[RibbonSegment] = []
        for chain in tqdm(chains, desc="Ribbon chains", disable=not self.config.show_progress, leave=False):
            check_cancelled(token)
            chain_segments = self.chain_segments(chain)
            self.logger.debug(f"Chain {chain.chain_id}: {len(chain)} residues, {len(chain_segments)} segments")
            segments.extend(chain_segments)
        check_cancelled(token)
        self.logger.info(f"Generated {len(segments)} ribbon segments from {len(chains)} chains")
        return segments
