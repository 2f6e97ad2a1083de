"""Pytest configuration and shared fixtures for the command logic tests."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pointing_nav.collaborators import Collaborators, OutputSink  # noqa: E402
from pointing_nav.command_channel import CommandChannel  # noqa: E402
from pointing_nav.config import NZ, WorkspaceConfig  # noqa: E402
from pointing_nav.geometry import Point2D, Point3D, Pose2D, Region  # noqa: E402
from pointing_nav.landscape import LandscapeCache  # noqa: E402
from pointing_nav.look_pipeline import LookContext, LookPipeline  # noqa: E402
from pointing_nav.pose_tracker import PoseTracker  # noqa: E402

# small grids keep the fixtures readable
TEST_RES = 4


def flat_landscape(value=0.5, res=TEST_RES):
    return [value] * (NZ * res * res)


def flat_mapped(value=0.25, res=TEST_RES):
    return [value] * (res * res)


@pytest.fixture
def workspace() -> WorkspaceConfig:
    """400x400 workspace as used by the real setup, with 4x4 grids."""
    return WorkspaceConfig(hsize=400, vsize=400, res=TEST_RES)


@pytest.fixture
def collaborators() -> MagicMock:
    """Services that all succeed: target (50, -30), goal (100, 100), 3-point path."""
    mock = MagicMock(spec=Collaborators)
    mock.generate_landscape.return_value = flat_landscape()
    mock.extract_target.return_value = Point2D(50.0, -30.0)
    mock.map_relevance.return_value = flat_mapped()
    mock.sample_goal.return_value = Point2D(100.0, 100.0)
    mock.plan_path.return_value = [
        Point3D(0.0, 0.0, 0.0),
        Point3D(50.0, 50.0, 0.0),
        Point3D(100.0, 100.0, 0.0),
    ]
    return mock


@pytest.fixture
def sink() -> MagicMock:
    return MagicMock(spec=OutputSink)


@pytest.fixture
def sleep() -> MagicMock:
    return MagicMock()


@pytest.fixture
def landscape_cache(collaborators, workspace, sleep) -> LandscapeCache:
    """Cache that has not contacted the spatial reasoner yet."""
    return LandscapeCache(collaborators, workspace.res, attempts=3, backoff=1.0, sleep=sleep)


@pytest.fixture
def landscapes(landscape_cache) -> LandscapeCache:
    landscape_cache.initialize(Pose2D(), (80.0, 80.0))
    return landscape_cache


@pytest.fixture
def poses() -> PoseTracker:
    return PoseTracker()


@pytest.fixture
def commands() -> CommandChannel:
    return CommandChannel()


@pytest.fixture
def context(poses, workspace) -> LookContext:
    return LookContext(
        poses=poses,
        workspace=Region.box(0.0, 0.0, workspace.hsize, workspace.vsize),
        obstacle_region=Region.box(-100.0, 50.0, 80.0, 80.0),
    )


@pytest.fixture
def pipeline(collaborators, landscapes, sink, workspace) -> LookPipeline:
    return LookPipeline(collaborators, landscapes, sink, workspace)
