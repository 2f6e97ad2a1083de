# command logic - one tick of the main loop
# look drives the pipeline to completion or abort, go/stop drive the gate,
# the command slot is cleared after every handled command

import logging

from pointing_nav.command_channel import Command
from pointing_nav.geometry import Region
from pointing_nav.look_pipeline import LookContext, LookPipeline
from pointing_nav.motion_gate import MotionGate


class CommandLogic:

    def __init__(self, poses, commands, landscapes, collaborators, sink, config, logger=None):
        self.poses = poses
        self.commands = commands
        self.landscapes = landscapes
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

        self.pipeline = LookPipeline(collaborators, landscapes, sink, config, logger=self.logger)
        self.gate = MotionGate(sink, logger=self.logger)

        self.workspace = Region.box(0.0, 0.0, config.hsize, config.vsize)
        self.obstacle_region = None
        self.last_outcome = None

    def start(self):
        """Capture the static obstacle and fetch the landscapes.

        Must succeed before the first tick; ``CollaboratorUnavailable`` from
        the spatial reasoner is left to the caller as a fatal error.
        """
        obstacle = self.poses.obstacle()
        size_x, size_y = self.config.obstacle_size
        # static objects: the obstacle region is assigned only once
        self.obstacle_region = Region.box(obstacle.x, obstacle.y, size_x, size_y)
        self.logger.info(f"Obstacle region at ({obstacle.x:.1f}, {obstacle.y:.1f}), "
                         f"size {size_x:.0f}x{size_y:.0f}")
        return self.landscapes.initialize(obstacle, (size_x, size_y))

    def tick(self):
        if self.obstacle_region is None:
            raise RuntimeError("CommandLogic.tick() called before start()")

        command = self.commands.peek()
        if command is Command.NONE:
            return command

        try:
            if command is Command.LOOK:
                context = LookContext(poses=self.poses, workspace=self.workspace,
                                      obstacle_region=self.obstacle_region)
                self.last_outcome = self.pipeline.run(context)
            else:
                self.gate.apply(command)
        finally:
            # anything that arrived during the look is dropped with it
            self.commands.clear()
        return command
