#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Representation Dispatcher

One class per display mode, each owning its geometry derivation, plus a thin
dispatcher and a background task wrapper.
"""

from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Type

from ..config import GeometryConfig
from ..errors import ComputationCancelled, ConfigurationError
from ..models.atom import Atom
from ..models.geometry import Bond, ResidueSurfaceBlob, RibbonSegment
from ..models.structure import Model
from ..utils.common import CancellationToken, check_cancelled
from ..utils.logger import Logger
from .bonds import BondInferenceEngine
from .relaxation import SpaceFillingSolver
from .ribbon import BackboneCurveGenerator
from .surface import SurfaceApproximator


@dataclass
class GeometryResult:
    """
    Derived geometry of one model in one display mode.

    Attributes:
        mode (str): Representation name
        model_number (int): Source model serial
        atoms (List[Atom]): Atoms of the (possibly subsampled) model
        index_map (List[int]): Source model index of each atom in ``atoms``
        bonds (List[Bond]): Bond list
        segments (List[RibbonSegment]): Ribbon segments
        overrides (Dict[int, Tuple[float, float, float]]): Relaxed positions in Å
        radii (Dict[int, float]): Sphere radius per atom in Å
        blobs (List[ResidueSurfaceBlob]): Surface blobs
    """
    mode: str
    model_number: int
    atoms: List[Atom]
    index_map: List[int]
    bonds: List[Bond] = field(default_factory=list)
    segments: List[RibbonSegment] = field(default_factory=list)
    overrides: Dict[int, Tuple[float, float, float]] = field(default_factory=dict)
    radii: Dict[int, float] = field(default_factory=dict)
    blobs: List[ResidueSurfaceBlob] = field(default_factory=list)

    def to_dict(self, scale: float = 1.0) -> Dict:
        """Plain-data form with every length multiplied by ``scale``."""
        return {
            'mode': self.mode,
            'model': self.model_number,
            'atoms': [{'index': a.index, 'element': a.element.symbol,
                       'position': [c * scale for c in a.position],
                       'color': list(a.element.color)} for a in self.atoms],
            'indexMap': list(self.index_map),
            'bonds': [b.to_dict(scale) for b in self.bonds],
            'ribbonSegments': [s.to_dict(scale) for s in self.segments],
            'relaxedPositions': {str(i): [c * scale for c in p] for i, p in self.overrides.items()},
            'radii': {str(i): r * scale for i, r in self.radii.items()},
            'surfaceBlobs': [b.to_dict(scale) for b in self.blobs],
        }


class Representation:
    """
    Base class for display modes.

    Attributes:
        config (GeometryConfig): Shared parameters
        logger (Logger): Logger instance
    """
    name = ""

    def __init__(self, config: Optional[GeometryConfig] = None, logger: Optional[Logger] = None):
        self.config = config or GeometryConfig()
        self.logger = logger or Logger()

    def derive(self, model: Model, result: GeometryResult, token: Optional[CancellationToken] = None,
               reference: Optional[Sequence[Atom]] = None) -> GeometryResult:
        raise NotImplementedError


class BallAndStick(Representation):
    """Atoms plus valence-limited bonds with permissive backfill."""
    name = "ball-and-stick"

    def derive(self, model, result, token=None, reference=None):
        engine = BondInferenceEngine(self.config, self.logger.child("bonds"))
        result.bonds = engine.infer_bonds(model, token)
        result.radii = {a.index: a.element.display_radius for a in model.atoms}
        return result


class SpaceFilling(Representation):
    """Enlarged spheres at relaxed positions."""
    name = "space-filling"

    def derive(self, model, result, token=None, reference=None):
        solver = SpaceFillingSolver(self.config, self.logger.child("relaxation"))
        result.overrides = solver.relax(model, token)
        result.radii = dict(enumerate(solver.sphere_radii(model).tolist()))
        return result


class Ribbon(Representation):
    """Backbone ribbon segments, with plain distance bonds on small models."""
    name = "ribbon"

    def derive(self, model, result, token=None, reference=None):
        generator = BackboneCurveGenerator(self.config, self.logger.child("ribbon"))
        result.segments = generator.generate(model, token)
        if model.atom_count < self.config.simple_bond_atom_limit:
            engine = BondInferenceEngine(self.config, self.logger.child("bonds"))
            result.bonds = engine.simple_bonds(model, token)
        return result


class Surface(Representation):
    """Per-residue overlapping-sphere blobs."""
    name = "surface"

    def derive(self, model, result, token=None, reference=None):
        approximator = SurfaceApproximator(self.config, self.logger.child("surface"))
        result.blobs = approximator.build(model, reference, token)
        return result


REPRESENTATIONS: Dict[str, Type[Representation]] = {
    BallAndStick.name: BallAndStick,
    SpaceFilling.name: SpaceFilling,
    Ribbon.name: Ribbon,
    Surface.name: Surface,
}


def get_representation(mode: str, config: Optional[GeometryConfig] = None,
                       logger: Optional[Logger] = None) -> Representation:
    try:
        representation_class = REPRESENTATIONS[mode]
    except KeyError:
        raise ConfigurationError(f"Unknown display mode '{mode}' "
                                 f"(expected one of: {', '.join(REPRESENTATIONS)})") from None
    return representation_class(config, logger)


def derive_geometry(model: Model, mode: str, config: Optional[GeometryConfig] = None,
                    logger: Optional[Logger] = None, token: Optional[CancellationToken] = None,
                    reference: Optional[Sequence[Atom]] = None) -> GeometryResult:
    """
    Derive the geometry of one display mode for a model.

    Args:
        model (Model): Source model; never modified
        mode (str): ball-and-stick, space-filling, ribbon or surface
        config (Optional[GeometryConfig]): Parameters; ``max_atoms`` subsamples first
        logger (Optional[Logger]): Logger instance
        token (Optional[CancellationToken]): Cancellation token
        reference (Optional[Sequence[Atom]]): Records for position-based residue matching

    Returns:
        GeometryResult: Derived geometry

    Raises:
        ConfigurationError: If the mode is unknown
        ComputationCancelled: If the token is cancelled before completion
    """
    config = config or GeometryConfig()
    logger = logger or Logger()
    check_cancelled(token)
    representation = get_representation(mode, config, logger)

    working, index_map = model.subsample(config.max_atoms)
    if working is not model:
        logger.info(f"Subsampled model {model.model_number} from {model.atom_count} to {working.atom_count} atoms")

    logger.debug(f"Deriving {mode} geometry for model {model.model_number}")
    result = GeometryResult(mode, model.model_number, list(working.atoms), index_map)
    result = representation.derive(working, result, token, reference)
    check_cancelled(token)
    return result


class GeometryTask:
    """
    Runs ``derive_geometry`` on a background worker with cooperative cancellation.

    A cancelled task never yields a result: ``result`` raises ComputationCancelled.
    """
    def __init__(self, model: Model, mode: str, config: Optional[GeometryConfig] = None,
                 logger: Optional[Logger] = None, reference: Optional[Sequence[Atom]] = None):
        self.model = model
        self.mode = mode
        self.config = config or GeometryConfig()
        self.logger = logger or Logger()
        self.reference = reference
        self.token = CancellationToken()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._future: Optional[Future] = None

    def start(self) -> "GeometryTask":
        if self._future is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pdbgeom")
            self._future = self._executor.submit(derive_geometry, self.model, self.mode, self.config,
                                                 self.logger, self.token, self.reference)
            self._executor.shutdown(wait=False)
        return self

    def cancel(self, reason: str = "Geometry computation cancelled") -> None:
        self.token.cancel(reason)
        if self._future is not None:
            self._future.cancel()

    @property
    def cancelled(self) -> bool:
        return self.token.is_cancelled

    def done(self) -> bool:
        return self._future is not None and self._future.done()

    def result(self, timeout: Optional[float] = None) -> GeometryResult:
        """
        Wait for the derived geometry.

        Args:
            timeout (Optional[float]): Seconds to wait, None to wait indefinitely

        Returns:
            GeometryResult: Completed geometry

        Raises:
            ComputationCancelled: If the task was cancelled
        """
        if self._future is None:
            self.start()
        try:
            result = self._future.result(timeout)
        except ComputationCancelled:
            self.logger.debug(f"{self.mode} computation cancelled")
            raise
        except CancelledError as e:
            raise ComputationCancelled(self.token.reason) from e
        if self.token.is_cancelled:
            raise ComputationCancelled(self.token.reason)
        return result
