# look pipeline - gesture -> target -> mapped landscape -> goal -> path -> turn
#
# one run per observed look command, stages strictly in order:
#   IDLE             gesture processing, target finite and inside workspace
#   TARGET_ACQUIRED  pertinence mapping, mapped grid finite
#   LANDSCAPE_MAPPED monte carlo sampling, goal finite and inside workspace
#   GOAL_COMPUTED    rrt* planning, planner must succeed
#   COMPLETED        publish path, turn to face goal
#
# any failure aborts the attempt before anything is published and the
# pipeline drops back to IDLE, nothing escapes run()

import logging
import threading
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional

from pointing_nav.errors import CollaboratorUnavailable, InvalidResult
from pointing_nav.geometry import (
    Point2D,
    Point3D,
    Region,
    heading_delta,
    in_workspace,
    is_finite_point,
)
from pointing_nav.landscape import MappedLandscape


class PipelineState(IntEnum):
    IDLE = 0
    TARGET_ACQUIRED = 1
    LANDSCAPE_MAPPED = 2
    GOAL_COMPUTED = 3
    COMPLETED = 4


@dataclass
class LookContext:
    # what a single look reads from the outside world
    poses: object  # PoseTracker, read fresh at each stage that needs it
    workspace: Region
    obstacle_region: Region  # captured once at startup, static world


@dataclass
class LookOutcome:
    states: List[PipelineState] = field(default_factory=list)
    target: Optional[Point2D] = None
    goal: Optional[Point2D] = None
    trajectory: Optional[List[Point2D]] = None
    turn: Optional[float] = None
    failure: Optional[Exception] = None
    rejected: bool = False

    @property
    def completed(self):
        return bool(self.states) and self.states[-1] is PipelineState.COMPLETED

    @property
    def reached(self):
        return self.states[-1] if self.states else PipelineState.IDLE


class LookPipeline:

    def __init__(self, collaborators, landscapes, sink, config, logger=None):
        self.collaborators = collaborators
        self.landscapes = landscapes
        self.sink = sink
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.state = PipelineState.IDLE
        self._guard = threading.Lock()

    @property
    def busy(self):
        return self._guard.locked()

    def run(self, context):
        # at most one attempt in flight, a concurrent caller is turned away
        if not self._guard.acquire(blocking=False):
            self.logger.warning("Look already in progress, ignoring request")
            return LookOutcome(rejected=True)

        outcome = LookOutcome(states=[PipelineState.IDLE])
        try:
            self._run_stages(context, outcome)
        except CollaboratorUnavailable as e:
            outcome.failure = e
            self.logger.error(f"Look aborted at {outcome.reached.name}: {e}")
        except InvalidResult as e:
            outcome.failure = e
            self.logger.warning(f"Look aborted at {outcome.reached.name}: {e}, please try again")
        except Exception as e:
            # anything else aborts the attempt too, the loop keeps serving
            outcome.failure = e
            self.logger.error(f"Look aborted at {outcome.reached.name}: unexpected {type(e).__name__}: {e}")
        finally:
            self.state = PipelineState.IDLE
            self._guard.release()
        return outcome

    def _advance(self, outcome, state):
        self.state = state
        outcome.states.append(state)

    def _check_point(self, stage, point):
        if not is_finite_point(point):
            raise InvalidResult(stage, f"non-finite point ({point.x}, {point.y})")
        if not in_workspace(point, self.config.half_h, self.config.half_v):
            raise InvalidResult(stage, f"({point.x:.1f}, {point.y:.1f}) out of the bounds")

    def _run_stages(self, context, outcome):
        gesture = context.poses.gesture()
        self.logger.info(f"Calling gesture processing, gesture at ({gesture.x:.1f}, {gesture.y:.1f})")
        target = self.collaborators.extract_target(gesture)
        self._check_point('target', target)
        outcome.target = target
        self._advance(outcome, PipelineState.TARGET_ACQUIRED)
        self.logger.info(f"Target obtained: ({target.x:.1f}, {target.y:.1f})")

        self.logger.info("Calling pertinence mapping")
        values = self.collaborators.map_relevance(target, self.landscapes.landscape)
        mapped = MappedLandscape.from_flat(values, self.config.res)
        self._advance(outcome, PipelineState.LANDSCAPE_MAPPED)
        self.logger.info("Landscapes mapped")

        self.logger.info("Calling monte carlo sampling")
        goal = self.collaborators.sample_goal(target, mapped)
        self._check_point('goal', goal)
        outcome.goal = goal
        self._advance(outcome, PipelineState.GOAL_COMPUTED)
        self.logger.info(f"Goal obtained: ({goal.x:.1f}, {goal.y:.1f})")

        # planning starts from where the robot is now
        robot = context.poses.robot()
        start = Point3D(robot.x, robot.y, 0.0)
        goal_region = Region.box(goal.x, goal.y,
                                 self.config.goal_region_size, self.config.goal_region_size)
        self.logger.info("Calling rrt* path planner")
        path = self.collaborators.plan_path(context.workspace, [context.obstacle_region],
                                            start, goal_region)

        # only x and y matter downstream
        trajectory = [Point2D(float(p.x), float(p.y)) for p in path]
        for i, point in enumerate(trajectory):
            self.logger.debug(f"Point {i}: ({point.x:.1f}, {point.y:.1f})")
        self.logger.info(f"Path found ({len(trajectory)} points): publishing")
        self.sink.publish_trajectory(trajectory)
        outcome.trajectory = trajectory
        self._advance(outcome, PipelineState.COMPLETED)

        # the robot may have moved while the services ran
        delta = heading_delta(context.poses.robot(), goal)
        self.sink.publish_turn(delta)
        outcome.turn = delta
        self.logger.info(f"Look: turning {delta:.3f} rad to face goal")
