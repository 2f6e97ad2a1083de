# launch file for the command logic node
# parameters come from config/pointing_nav.yaml unless params_file is given

import os
from launch import LaunchDescription
from launch.actions import DeclareLaunchArgument
from launch.substitutions import LaunchConfiguration
from launch_ros.actions import Node
from ament_index_python.packages import get_package_share_directory


def generate_launch_description():
    package_name = 'pointing_nav'
    package_dir = get_package_share_directory(package_name)

    params_arg = DeclareLaunchArgument(
        'params_file',
        default_value=os.path.join(package_dir, 'config', 'pointing_nav.yaml'),
        description='Parameter file for the command logic node'
    )

    command_logic_node = Node(
        package=package_name,
        executable='command_logic',
        name='command_logic',
        output='screen',
        parameters=[LaunchConfiguration('params_file')]
    )

    return LaunchDescription([
        params_arg,
        command_logic_node,
    ])
