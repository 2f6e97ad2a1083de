# command logic config - workspace geometry, service names and tunable parameters

from dataclasses import dataclass

# workspace (centimeter-equivalent units, centered at origin)
HSIZE = 400
VSIZE = 400
METERS_TO_WORKSPACE = 100.0  # mocap feeds arrive in meters

# landscapes
RES = 40  # grid resolution
NZ = 5  # number of relations (north, west, south, east, distance-to)
LANDSCAPE_NAMES = ('north', 'west', 'south', 'east', 'distance')

# regions for the path planner
OBSTACLE_SIZE = (80.0, 80.0)  # predefined obstacle dimensions
GOAL_REGION_SIZE = 20.0

# main loop
LOOP_RATE_HZ = 10.0

# service calls
SERVICE_TIMEOUT = 5.0  # seconds, per call
LANDSCAPE_ATTEMPTS = 3
LANDSCAPE_BACKOFF = 1.0  # seconds, doubled after each failed attempt
OBSTACLE_WAIT = 2.0  # seconds to wait for the first obstacle pose

# service names
SPATIAL_REASONER_SERVICE = 'spatial_reasoner'
GESTURE_PROCESSING_SERVICE = 'gesture_processing'
PERTINENCE_MAPPING_SERVICE = 'pertinence_mapper'
MONTE_CARLO_SERVICE = 'monte_carlo'
PATH_PLANNER_SERVICE = 'rrtStarService'

# topics
COMMAND_TOPIC = 'command'
ROBOT_POSE_TOPIC = 'Robot/ground_pose'
OBSTACLE_POSE_TOPIC = 'Obstacle/ground_pose'
GESTURE_POSE_TOPIC = 'Gesture/pose'
PATH_TOPIC = 'path'
ENABLE_TOPIC = 'enable'
TURN_TOPIC = 'turn_command'


@dataclass(frozen=True)
class WorkspaceConfig:
    # values the look pipeline depends on, validated once at construction
    hsize: float = HSIZE
    vsize: float = VSIZE
    res: int = RES
    obstacle_size: tuple = OBSTACLE_SIZE
    goal_region_size: float = GOAL_REGION_SIZE

    def __post_init__(self):
        if self.hsize <= 0 or self.vsize <= 0:
            raise ValueError(f"workspace size must be positive, got {self.hsize}x{self.vsize}")
        if int(self.res) != self.res or self.res < 1:
            raise ValueError(f"grid resolution must be a positive integer, got {self.res}")
        if len(self.obstacle_size) != 2 or min(self.obstacle_size) <= 0:
            raise ValueError(f"obstacle size must be two positive values, got {self.obstacle_size}")
        if self.goal_region_size <= 0:
            raise ValueError(f"goal region size must be positive, got {self.goal_region_size}")

    @property
    def half_h(self):
        return self.hsize / 2.0

    @property
    def half_v(self):
        return self.vsize / 2.0
