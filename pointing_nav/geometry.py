# geometry types and helpers shared by the tracker, pipeline and ros bridge
# kept free of any ros imports so the core can be tested on its own

import math
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Pose2D:
    x: float = 0.0
    y: float = 0.0
    theta: float = 0.0  # heading (rad)


@dataclass(frozen=True)
class Pose3D:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    # quaternion (x, y, z, w), carried through untouched
    orientation: tuple = field(default=(0.0, 0.0, 0.0, 1.0))


@dataclass(frozen=True)
class Point2D:
    x: float
    y: float


@dataclass(frozen=True)
class Point3D:
    x: float
    y: float
    z: float = 0.0


@dataclass(frozen=True)
class Region:
    # axis-aligned box as the path planner expects it
    center_x: float
    center_y: float
    size_x: float
    size_y: float
    center_z: float = 0.0
    size_z: float = 0.0

    @classmethod
    def box(cls, center_x, center_y, size_x, size_y):
        return cls(center_x=float(center_x), center_y=float(center_y),
                   size_x=float(size_x), size_y=float(size_y))


def normalize_angle(angle):
    # wrap angle to (-pi, pi]
    wrapped = math.atan2(math.sin(angle), math.cos(angle))
    return math.pi if wrapped <= -math.pi else wrapped


def heading_delta(robot, goal):
    # angle the robot must turn in place to face the goal
    desired = math.atan2(goal.y - robot.y, goal.x - robot.x)
    return normalize_angle(desired - robot.theta)


def is_finite_point(point):
    return math.isfinite(point.x) and math.isfinite(point.y)


def in_workspace(point, half_h, half_v):
    # bounds are inclusive, nan never passes
    return -half_h <= point.x <= half_h and -half_v <= point.y <= half_v


def scale_pose2d(pose, factor):
    return Pose2D(x=factor * pose.x, y=factor * pose.y, theta=pose.theta)


def scale_pose3d(pose, factor):
    return Pose3D(x=factor * pose.x, y=factor * pose.y, z=factor * pose.z,
                  orientation=pose.orientation)
