# pointing nav - gesture-directed look behavior and go/stop gating
# core modules are ros-free, ros_bridge and command_logic_node need rclpy

from pointing_nav.command_logic import CommandLogic

__all__ = ['CommandLogic']
__version__ = '0.1.0'
