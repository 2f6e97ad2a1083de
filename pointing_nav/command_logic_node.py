# command logic (master) node - turns interpreter commands into robot motion
#
# at startup the spatial reasoner is called once for the environment
# landscapes, then a 10 Hz loop reacts to the interpreter:
#   look (1) - gesture processing, pertinence mapping, monte carlo, rrt*,
#              publish the path and turn towards the goal
#   go   (2) - enable the robot controller
#   stop (3) - disable the robot controller
# anything else is ignored
#
# subscriptions and service responses are handled by a multi-threaded
# executor in the background, the loop itself runs in the main thread

import threading
import time

import rclpy
from rclpy.exceptions import ROSInterruptException
from rclpy.executors import ExternalShutdownException, MultiThreadedExecutor
from rclpy.node import Node
from geometry_msgs.msg import Pose2D, PoseStamped
from std_msgs.msg import UInt8

from pointing_nav import config
from pointing_nav.command_channel import CommandChannel
from pointing_nav.command_logic import CommandLogic
from pointing_nav.errors import PointingNavError
from pointing_nav.landscape import LandscapeCache
from pointing_nav.pose_tracker import PoseTracker
from pointing_nav.ros_bridge import (
    RosOutputSink,
    ServiceCollaborators,
    pose2d_from_msg,
    pose3d_from_msg,
)


class CommandLogicNode(Node):
    def __init__(self):
        super().__init__('command_logic')

        self.declare_parameter('hsize', float(config.HSIZE))
        self.declare_parameter('vsize', float(config.VSIZE))
        self.declare_parameter('res', config.RES)
        self.declare_parameter('obstacle_size', list(config.OBSTACLE_SIZE))
        self.declare_parameter('goal_region_size', config.GOAL_REGION_SIZE)
        self.declare_parameter('meters_to_workspace', config.METERS_TO_WORKSPACE)
        self.declare_parameter('loop_rate', config.LOOP_RATE_HZ)
        self.declare_parameter('service_timeout', config.SERVICE_TIMEOUT)
        self.declare_parameter('landscape_attempts', config.LANDSCAPE_ATTEMPTS)
        self.declare_parameter('landscape_backoff', config.LANDSCAPE_BACKOFF)
        self.declare_parameter('obstacle_wait', config.OBSTACLE_WAIT)
        self.declare_parameter('frame_id', 'world')

        self.workspace = config.WorkspaceConfig(
            hsize=float(self.get_parameter('hsize').value),
            vsize=float(self.get_parameter('vsize').value),
            res=int(self.get_parameter('res').value),
            obstacle_size=tuple(float(v) for v in self.get_parameter('obstacle_size').value),
            goal_region_size=float(self.get_parameter('goal_region_size').value),
        )
        self.loop_rate = float(self.get_parameter('loop_rate').value)
        self.obstacle_wait = float(self.get_parameter('obstacle_wait').value)

        logger = self.get_logger()

        # latest poses and command, written by the subscription callbacks
        self.poses = PoseTracker(scale=float(self.get_parameter('meters_to_workspace').value))
        self.commands = CommandChannel(logger=logger)

        # subscriber from command interpreter
        self.sub_cmd = self.create_subscription(
            UInt8, config.COMMAND_TOPIC, self.command_callback, 3)
        # subscribers from motion capture
        self.sub_robot = self.create_subscription(
            Pose2D, config.ROBOT_POSE_TOPIC, self.robot_callback, 10)
        self.sub_gesture = self.create_subscription(
            PoseStamped, config.GESTURE_POSE_TOPIC, self.gesture_callback, 1)
        self.sub_obs = self.create_subscription(
            Pose2D, config.OBSTACLE_POSE_TOPIC, self.obstacle_callback, 1)

        collaborators = ServiceCollaborators(
            self, timeout=float(self.get_parameter('service_timeout').value))
        sink = RosOutputSink(self, frame_id=self.get_parameter('frame_id').value)
        landscapes = LandscapeCache(
            collaborators, self.workspace.res,
            attempts=int(self.get_parameter('landscape_attempts').value),
            backoff=float(self.get_parameter('landscape_backoff').value),
            logger=logger)

        self.logic = CommandLogic(self.poses, self.commands, landscapes,
                                  collaborators, sink, self.workspace, logger=logger)

        logger.info("Command logic (master) node active")

    def command_callback(self, msg):
        command = self.commands.set(msg.data)
        self.get_logger().info(f"Command received from interpreter: {command.name}")

    def robot_callback(self, msg):
        self.poses.update_robot(pose2d_from_msg(msg))

    def obstacle_callback(self, msg):
        self.poses.update_obstacle(pose2d_from_msg(msg))

    def gesture_callback(self, msg):
        self.poses.update_gesture(pose3d_from_msg(msg))

    def wait_for_obstacle(self):
        # give mocap a moment so the obstacle region is not built at the origin
        deadline = time.monotonic() + self.obstacle_wait
        while not self.poses.has_obstacle() and time.monotonic() < deadline:
            time.sleep(0.05)
        if not self.poses.has_obstacle():
            self.get_logger().warning(
                f"No obstacle pose within {self.obstacle_wait:.1f}s, assuming origin")

    def run(self):
        rate = self.create_rate(self.loop_rate)
        while rclpy.ok():
            self.logic.tick()
            rate.sleep()


def main(args=None):
    rclpy.init(args=args)
    node = CommandLogicNode()

    executor = MultiThreadedExecutor()
    executor.add_node(node)
    spinner = threading.Thread(target=executor.spin, daemon=True)
    spinner.start()

    status = 0
    try:
        node.get_logger().info("Initialization: calling spatial reasoner")
        node.wait_for_obstacle()
        node.logic.start()
        node.run()
    except PointingNavError as e:
        node.get_logger().fatal(f"Initialization failed, cannot serve commands: {e}")
        status = 1
    except (KeyboardInterrupt, ExternalShutdownException, ROSInterruptException):
        pass
    finally:
        executor.shutdown()
        node.destroy_node()
        if rclpy.ok():
            rclpy.shutdown()
    return status


if __name__ == '__main__':
    raise SystemExit(main())
