# collaborator and output contracts the command logic talks to
# the ros node backs these with service clients and publishers, tests with mocks

import threading
import time
from abc import ABC, abstractmethod

from pointing_nav.errors import CollaboratorTimeout, CollaboratorUnavailable, PointingNavError


def call_service(client, request, timeout, parse=None, clock=time.monotonic):
    """Blocking request/response on a ros-style service client.

    ``client`` needs ``srv_name``, ``wait_for_service``, ``call_async`` and
    ``remove_pending_request``; the returned future needs
    ``add_done_callback``, ``exception`` and ``result``. ``timeout`` bounds
    the whole call, service discovery included. ``parse`` turns the response
    into core types. Anything that goes wrong surfaces as
    ``CollaboratorUnavailable`` (or ``CollaboratorTimeout``).
    """
    name = client.srv_name
    deadline = clock() + timeout
    try:
        if not client.wait_for_service(timeout_sec=timeout):
            raise CollaboratorUnavailable(name, "service not available")

        done = threading.Event()
        future = client.call_async(request)
        future.add_done_callback(lambda _: done.set())
        if not done.wait(max(0.0, deadline - clock())):
            client.remove_pending_request(future)
            raise CollaboratorTimeout(name, timeout)

        if future.exception() is not None:
            raise CollaboratorUnavailable(name, str(future.exception()))
        response = future.result()
        if response is None:
            raise CollaboratorUnavailable(name, "no response")
        return parse(response) if parse is not None else response
    except PointingNavError:
        raise
    except Exception as e:
        # rcl errors, malformed responses
        raise CollaboratorUnavailable(name, f"{type(e).__name__}: {e}") from e


class Collaborators(ABC):
    """Request/response services driven by the command logic.

    Every call blocks until the service answers. Implementations raise
    ``CollaboratorUnavailable`` when a service cannot be reached or reports
    failure, and ``CollaboratorTimeout`` when it does not answer in time.
    """

    @abstractmethod
    def generate_landscape(self, center, dimensions):
        """Spatial reasoner: obstacle center + (width, height) -> flat list of NZ*RES*RES floats."""

    @abstractmethod
    def extract_target(self, gesture):
        """Gesture processing: Pose3D -> Point2D target."""

    @abstractmethod
    def map_relevance(self, target, landscape):
        """Pertinence mapping: target + RelevanceLandscape -> flat list of RES*RES floats."""

    @abstractmethod
    def sample_goal(self, target, mapped):
        """Monte Carlo sampling: target + MappedLandscape -> Point2D goal."""

    @abstractmethod
    def plan_path(self, workspace, obstacles, start, goal_region):
        """RRT* planning: regions + Point3D start -> list of Point3D."""


class OutputSink(ABC):
    # fire-and-forget, nothing is acknowledged

    @abstractmethod
    def publish_trajectory(self, points):
        pass

    @abstractmethod
    def publish_enable(self, enabled):
        pass

    @abstractmethod
    def publish_turn(self, delta):
        pass
