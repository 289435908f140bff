"""
Drivetrain configuration.

Defaults for a mecanum chassis and the control loop that drives odometry,
plus a small DrivetrainConfig object that turns wheel geometry into a
MecanumKinematics. Scripts mirror these values as command-line flags.
"""

import logging

from mecanum_odometry.geometry import Translation2d
from mecanum_odometry.kinematics import MecanumKinematics

logger = logging.getLogger(__name__)


# =============================================================================
# DEFAULTS
# =============================================================================

# Control loop period in seconds (50 Hz)
CONTROL_PERIOD = 0.02

# Wheel mounts relative to the chassis center: (x forward, y left)
DEFAULT_WHEEL_MOUNTS = {
    'front_left': (0.3, 0.3),
    'front_right': (0.3, -0.3),
    'rear_left': (-0.3, 0.3),
    'rear_right': (-0.3, -0.3),
}

WHEEL_NAMES = ('front_left', 'front_right', 'rear_left', 'rear_right')

# Standard deviations used when simulating sensor noise
WHEEL_SPEED_NOISE = 0.1   # per-wheel speed, units/s
GYRO_NOISE = 0.05         # heading, radians


class DrivetrainConfig:
    """Geometry and timing of one mecanum drivetrain.

    Args:
        front_left, front_right, rear_left, rear_right: Translation2d
            wheel mount positions relative to the chassis center.
        control_period: Seconds between odometry updates.

    Raises:
        ValueError: control_period is not positive.
    """

    def __init__(self, front_left, front_right, rear_left, rear_right,
                 control_period=CONTROL_PERIOD):
        if control_period <= 0:
            raise ValueError(f'control_period must be positive, got {control_period}')
        self.front_left = front_left
        self.front_right = front_right
        self.rear_left = rear_left
        self.rear_right = rear_right
        self.control_period = control_period

    @classmethod
    def from_footprint(cls, wheel_base, track_width, control_period=CONTROL_PERIOD):
        """Rectangular layout centred on the chassis.

        Args:
            wheel_base: Front-to-rear distance between axles.
            track_width: Left-to-right distance between wheels.
            control_period: Seconds between odometry updates.
        """
        half_x = wheel_base / 2.0
        half_y = track_width / 2.0
        return cls(
            Translation2d(half_x, half_y),
            Translation2d(half_x, -half_y),
            Translation2d(-half_x, half_y),
            Translation2d(-half_x, -half_y),
            control_period=control_period,
        )

    @classmethod
    def from_dict(cls, data):
        """Build from a mapping such as DEFAULT_WHEEL_MOUNTS.

        Expects one (x, y) pair per wheel name and an optional
        'control_period'.

        Raises:
            ValueError: A wheel is missing or its mount is not an (x, y) pair.
        """
        mounts = []
        for name in WHEEL_NAMES:
            if name not in data:
                raise ValueError(f'missing wheel mount: {name}')
            try:
                x, y = data[name]
            except (TypeError, ValueError) as e:
                raise ValueError(f'wheel mount {name} must be an (x, y) pair: {e}') from e
            mounts.append(Translation2d(x, y))
        return cls(*mounts, control_period=data.get('control_period', CONTROL_PERIOD))

    @classmethod
    def default(cls):
        return cls.from_dict(DEFAULT_WHEEL_MOUNTS)

    @property
    def wheel_mounts(self):
        return (self.front_left, self.front_right, self.rear_left, self.rear_right)

    def build_kinematics(self):
        """Create the MecanumKinematics for this layout.

        Raises:
            SingularConfiguration: The layout is degenerate.
        """
        logger.debug(f'Building kinematics for {self}')
        return MecanumKinematics(*self.wheel_mounts)

    def __repr__(self):
        return (f'DrivetrainConfig(mounts={self.wheel_mounts}, '
                f'control_period={self.control_period})')
