# pose tracker - latest robot, obstacle and gesture poses from mocap
# each feed writes its own cell, last value wins, no history kept

import threading
from dataclasses import dataclass

from pointing_nav.config import METERS_TO_WORKSPACE
from pointing_nav.geometry import Pose2D, Pose3D, scale_pose2d, scale_pose3d


@dataclass(frozen=True)
class PoseSnapshot:
    robot: Pose2D
    obstacle: Pose2D
    gesture: Pose3D


class _LatestCell:
    # single-writer / many-reader cell, guarded so executor threads and the
    # main loop never see a half-written pose

    def __init__(self, value):
        self._lock = threading.Lock()
        self._value = value
        self._updated = False

    def set(self, value):
        with self._lock:
            self._value = value
            self._updated = True

    def get(self):
        with self._lock:
            return self._value

    @property
    def updated(self):
        with self._lock:
            return self._updated


class PoseTracker:
    # inputs are in meters, stored positions are scaled to workspace units
    # poses default to the origin until their feed first reports

    def __init__(self, scale=METERS_TO_WORKSPACE):
        self.scale = scale
        self._robot = _LatestCell(Pose2D())
        self._obstacle = _LatestCell(Pose2D())
        self._gesture = _LatestCell(Pose3D())

    def update_robot(self, pose):
        self._robot.set(scale_pose2d(pose, self.scale))

    def update_obstacle(self, pose):
        self._obstacle.set(scale_pose2d(pose, self.scale))

    def update_gesture(self, pose):
        self._gesture.set(scale_pose3d(pose, self.scale))

    def robot(self):
        return self._robot.get()

    def obstacle(self):
        return self._obstacle.get()

    def gesture(self):
        return self._gesture.get()

    def has_obstacle(self):
        return self._obstacle.updated

    def snapshot(self):
        return PoseSnapshot(robot=self._robot.get(),
                            obstacle=self._obstacle.get(),
                            gesture=self._gesture.get())
