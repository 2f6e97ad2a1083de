# landscapes - static relevance grids from the spatial reasoner and the
# per-look mapped grid from the pertinence mapper

import logging
import time

import numpy as np

from pointing_nav.config import (
    LANDSCAPE_ATTEMPTS,
    LANDSCAPE_BACKOFF,
    LANDSCAPE_NAMES,
    NZ,
)
from pointing_nav.errors import CollaboratorUnavailable, InvalidResult


def _grid_stack(values, depth, res, stage):
    # flat service payload -> read-only (depth, res, res) array
    grids = np.asarray(values, dtype=float)
    if grids.size != depth * res * res:
        raise InvalidResult(stage, f"expected {depth * res * res} values, got {grids.size}")
    grids = grids.reshape(depth, res, res)
    grids.setflags(write=False)
    return grids


class RelevanceLandscape:
    # north, west, south, east and distance-to-obstacle grids, values in [0, 1]
    # built once at startup and shared read-only by every look

    def __init__(self, grids):
        grids = np.asarray(grids, dtype=float)
        if grids.ndim != 3 or grids.shape[0] != NZ or grids.shape[1] != grids.shape[2]:
            raise InvalidResult('landscape', f"expected ({NZ}, RES, RES) grids, got {grids.shape}")
        if grids.flags.writeable:
            grids = grids.copy()
            grids.setflags(write=False)
        self.grids = grids

    @classmethod
    def from_flat(cls, values, res):
        return cls(_grid_stack(values, NZ, res, 'landscape'))

    @property
    def res(self):
        return self.grids.shape[1]

    def grid(self, name):
        return self.grids[LANDSCAPE_NAMES.index(name)]

    def flatten(self):
        # grid-major, row-major within a grid; the layout services expect
        return self.grids.ravel().tolist()


class MappedLandscape:
    # fused relevance for one target, owned by a single look attempt

    def __init__(self, grid):
        self.grid = grid

    @classmethod
    def from_flat(cls, values, res):
        grid = _grid_stack(values, 1, res, 'mapped landscape')[0]
        if not np.all(np.isfinite(grid)):
            raise InvalidResult('mapped landscape', "non-finite values in grid")
        return cls(grid)

    @property
    def res(self):
        return self.grid.shape[0]

    def flatten(self):
        return self.grid.ravel().tolist()


class LandscapeCache:
    """One-time acquisition of the environment landscapes.

    The spatial reasoner is called with bounded retries and a doubling
    backoff. When every attempt fails ``CollaboratorUnavailable`` propagates
    and the caller must not start serving commands.
    """

    def __init__(self, collaborators, res, attempts=LANDSCAPE_ATTEMPTS,
                 backoff=LANDSCAPE_BACKOFF, sleep=time.sleep, logger=None):
        if attempts < 1:
            raise ValueError(f"attempts must be at least 1, got {attempts}")
        self.collaborators = collaborators
        self.res = res
        self.attempts = attempts
        self.backoff = backoff
        self.sleep = sleep
        self.logger = logger or logging.getLogger(__name__)
        self._landscape = None

    @property
    def ready(self):
        return self._landscape is not None

    @property
    def landscape(self):
        if self._landscape is None:
            raise RuntimeError("landscape cache used before initialize()")
        return self._landscape

    def initialize(self, obstacle_center, obstacle_dimensions):
        if self._landscape is not None:
            raise RuntimeError("landscape cache already initialized")

        delay = self.backoff
        for attempt in range(1, self.attempts + 1):
            self.logger.info(f"Calling spatial reasoner (attempt {attempt}/{self.attempts})")
            try:
                values = self.collaborators.generate_landscape(obstacle_center, obstacle_dimensions)
            except CollaboratorUnavailable as e:
                if attempt == self.attempts:
                    self.logger.error(f"Spatial reasoner failed after {attempt} attempts: {e}")
                    raise
                self.logger.warning(f"Spatial reasoner attempt {attempt} failed: {e}, retrying in {delay:.1f}s")
                self.sleep(delay)
                delay *= 2
                continue

            self._landscape = RelevanceLandscape.from_flat(values, self.res)
            self.logger.info("Environment landscapes generated successfully")
            return self._landscape
