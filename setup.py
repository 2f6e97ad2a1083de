from setuptools import find_packages, setup
import os
from glob import glob
package_name = 'pointing_nav'

setup(
    name=package_name,
    version='0.1.0',
    packages=find_packages(exclude=['test']),
    data_files=[
        ('share/ament_index/resource_index/packages',
            ['resource/' + package_name]),
        ('share/' + package_name, ['package.xml']),
        (os.path.join('share', package_name, 'launch'), glob('launch/*.py')),
        (os.path.join('share', package_name, 'config'), glob('config/*.yaml')),
    ],
    install_requires=['setuptools', 'numpy'],
    zip_safe=True,
    maintainer='pointing_nav',
    maintainer_email='pointing_nav@todo.todo',
    description='Gesture-directed look behavior and go/stop gating for a mobile robot',
    license='Apache-2.0',
    extras_require={
        'test': [
            'pytest',
        ],
    },
    entry_points={
        'console_scripts': [
            'command_logic = pointing_nav.command_logic_node:main',
        ],
    },
)
