# ros bridge - service clients, publishers and message conversion
# for the ros-free command logic core

from geometry_msgs.msg import Pose, PoseStamped, Vector3
from geometry_msgs.msg import Pose2D as Pose2DMsg
from nav_msgs.msg import Path
from rclpy.callback_groups import ReentrantCallbackGroup
from std_msgs.msg import Bool, Float64

from miro_teleop.srv import (
    GestureProcessing,
    MonteCarlo,
    PertinenceMapping,
    SpatialReasoner,
)
from rrtstar_msgs.msg import Region as RegionMsg
from rrtstar_msgs.srv import RrtStarSRV

from pointing_nav import config
from pointing_nav.collaborators import Collaborators, OutputSink, call_service
from pointing_nav.geometry import Point2D, Point3D, Pose2D, Pose3D


# --- message conversion ---

def pose2d_from_msg(msg):
    return Pose2D(x=msg.x, y=msg.y, theta=msg.theta)


def pose3d_from_msg(msg):
    # accepts PoseStamped or Pose
    pose = msg.pose if isinstance(msg, PoseStamped) else msg
    q = pose.orientation
    return Pose3D(x=pose.position.x, y=pose.position.y, z=pose.position.z,
                  orientation=(q.x, q.y, q.z, q.w))


def pose_to_msg(pose):
    msg = Pose()
    msg.position.x = float(pose.x)
    msg.position.y = float(pose.y)
    msg.position.z = float(pose.z)
    msg.orientation.x, msg.orientation.y, msg.orientation.z, msg.orientation.w = (
        float(v) for v in pose.orientation)
    return msg


def point_to_pose2d_msg(point, theta=0.0):
    return Pose2DMsg(x=float(point.x), y=float(point.y), theta=float(theta))


def region_to_msg(region):
    msg = RegionMsg()
    msg.center_x = float(region.center_x)
    msg.center_y = float(region.center_y)
    msg.center_z = float(region.center_z)
    msg.size_x = float(region.size_x)
    msg.size_y = float(region.size_y)
    msg.size_z = float(region.size_z)
    return msg


# --- collaborators backed by services ---

class ServiceCollaborators(Collaborators):
    # calls block the caller on an event while the executor, spinning in
    # another thread, delivers the response

    def __init__(self, node, timeout=config.SERVICE_TIMEOUT, callback_group=None):
        self.node = node
        self.timeout = timeout
        group = callback_group or ReentrantCallbackGroup()

        self.cli_spat = node.create_client(
            SpatialReasoner, config.SPATIAL_REASONER_SERVICE, callback_group=group)
        self.cli_gest = node.create_client(
            GestureProcessing, config.GESTURE_PROCESSING_SERVICE, callback_group=group)
        self.cli_pert = node.create_client(
            PertinenceMapping, config.PERTINENCE_MAPPING_SERVICE, callback_group=group)
        self.cli_mont = node.create_client(
            MonteCarlo, config.MONTE_CARLO_SERVICE, callback_group=group)
        self.cli_rrts = node.create_client(
            RrtStarSRV, config.PATH_PLANNER_SERVICE, callback_group=group)

    def _call(self, client, request, parse):
        return call_service(client, request, self.timeout, parse=parse)

    def generate_landscape(self, center, dimensions):
        request = SpatialReasoner.Request()
        request.center = Pose2DMsg(x=float(center.x), y=float(center.y), theta=float(center.theta))
        request.dimensions = [float(d) for d in dimensions]
        return self._call(self.cli_spat, request, lambda r: list(r.matrices))

    def extract_target(self, gesture):
        request = GestureProcessing.Request()
        request.gesture = pose_to_msg(gesture)
        return self._call(self.cli_gest, request, lambda r: Point2D(r.target.x, r.target.y))

    def map_relevance(self, target, landscape):
        request = PertinenceMapping.Request()
        request.target = point_to_pose2d_msg(target)
        request.matrices = landscape.flatten()
        return self._call(self.cli_pert, request, lambda r: list(r.landscape))

    def sample_goal(self, target, mapped):
        request = MonteCarlo.Request()
        request.target = point_to_pose2d_msg(target)
        request.landscape = mapped.flatten()
        return self._call(self.cli_mont, request, lambda r: Point2D(r.goal.x, r.goal.y))

    def plan_path(self, workspace, obstacles, start, goal_region):
        request = RrtStarSRV.Request()
        request.workspace = region_to_msg(workspace)
        request.obstacles = [region_to_msg(r) for r in obstacles]
        request.goal = region_to_msg(goal_region)
        request.init = Vector3(x=float(start.x), y=float(start.y), z=float(start.z))
        return self._call(self.cli_rrts, request,
                          lambda r: [Point3D(p.x, p.y, p.z) for p in r.path])


# --- outputs ---

class RosOutputSink(OutputSink):

    def __init__(self, node, frame_id='world'):
        self.node = node
        self.frame_id = frame_id
        # publishers to robot controller
        self.path_pub = node.create_publisher(Path, config.PATH_TOPIC, 1)
        self.flag_pub = node.create_publisher(Bool, config.ENABLE_TOPIC, 1)
        self.turn_pub = node.create_publisher(Float64, config.TURN_TOPIC, 10)

    def publish_trajectory(self, points):
        msg = Path()
        msg.header.stamp = self.node.get_clock().now().to_msg()
        msg.header.frame_id = self.frame_id
        for point in points:
            pose = PoseStamped()
            pose.header = msg.header
            pose.pose.position.x = float(point.x)
            pose.pose.position.y = float(point.y)
            pose.pose.orientation.w = 1.0
            msg.poses.append(pose)
        self.path_pub.publish(msg)

    def publish_enable(self, enabled):
        self.flag_pub.publish(Bool(data=bool(enabled)))

    def publish_turn(self, delta):
        self.turn_pub.publish(Float64(data=float(delta)))
