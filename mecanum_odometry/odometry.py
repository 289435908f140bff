"""
Wheel + gyro odometry for a four-wheel mecanum chassis.

Pure Python module (no middleware imports). Each control tick the owner
passes in the latest gyro heading and the cumulative distance of every
wheel. Wheel travel since the previous tick is turned into a robot-relative
twist through the kinematics, the twist's heading change is replaced with
the one measured by the gyro, and the result is integrated onto the running
pose along an exact arc (SE(2) exponential map).

The gyro is authoritative for heading: the returned rotation is always the
latest gyro reading plus the offset fixed at the last reset. Wheels only
contribute translation.

Inputs are not validated. A NaN or infinite reading poisons the pose until
the next reset_position(). One instance belongs to one control loop; there
is no internal locking.
"""

import logging

from mecanum_odometry.geometry import Pose2d, Twist2d

logger = logging.getLogger(__name__)


class MecanumOdometry:
    """Tracks a field-relative pose from wheel encoders and a gyro.

    Args:
        kinematics: MecanumKinematics describing the chassis.
        gyro_angle: Current gyro reading (Rotation2d).
        wheel_positions: Current cumulative WheelPositions.
        initial_pose: Pose the robot starts at. Defaults to the origin
            facing along +X.
    """

    def __init__(self, kinematics, gyro_angle, wheel_positions, initial_pose=None):
        self._kinematics = kinematics
        self._pose = initial_pose if initial_pose is not None else Pose2d()
        self._gyro_offset = self._pose.rotation - gyro_angle
        self._previous_angle = self._pose.rotation
        self._previous_wheel_positions = wheel_positions.copy()
        self._previous_gyro = gyro_angle
        self._anchor = (gyro_angle, self._pose.rotation)

        logger.debug(f'Odometry initialised at {self._pose}')

    def reset_position(self, gyro_angle, wheel_positions, pose):
        """Re-anchor the estimate to a known pose.

        The next update() with the same gyro angle and wheel positions
        returns pose unchanged, bit for bit.

        Args:
            gyro_angle: Gyro reading at the moment of reset.
            wheel_positions: Wheel positions at the moment of reset.
            pose: Pose the robot is known to be at.
        """
        self._pose = pose
        self._previous_angle = pose.rotation
        self._gyro_offset = pose.rotation - gyro_angle
        self._previous_wheel_positions = wheel_positions.copy()
        self._previous_gyro = gyro_angle
        self._anchor = (gyro_angle, pose.rotation)

        logger.info(f'Odometry reset to {pose}')

    def reset_pose(self, pose):
        """Move the estimate to pose, keeping the stored sensor readings."""
        self._gyro_offset = self._gyro_offset + (pose.rotation - self._pose.rotation)
        self._pose = pose
        self._previous_angle = pose.rotation
        self._anchor = (self._previous_gyro, pose.rotation)

        logger.info(f'Odometry pose set to {pose}')

    def reset_translation(self, translation):
        """Move the estimate to translation, keeping the current heading."""
        self._pose = Pose2d(translation, self._pose.rotation)

        logger.info(f'Odometry translation set to {translation}')

    def reset_rotation(self, rotation):
        """Set the estimated heading, keeping the current translation."""
        self._gyro_offset = self._gyro_offset + (rotation - self._pose.rotation)
        self._pose = Pose2d(self._pose.translation, rotation)
        self._previous_angle = rotation
        self._anchor = (self._previous_gyro, rotation)

        logger.info(f'Odometry rotation set to {rotation}')

    def update(self, gyro_angle, wheel_positions):
        """Integrate one tick of sensor readings.

        Args:
            gyro_angle: Current gyro reading (Rotation2d).
            wheel_positions: Current cumulative WheelPositions.

        Returns:
            The updated field-relative Pose2d.
        """
        angle = self._field_angle(gyro_angle)

        twist = self._kinematics.to_twist_2d(
            self._previous_wheel_positions, wheel_positions
        )
        # Heading comes from the gyro, never from the wheels
        twist = Twist2d(twist.dx, twist.dy, (angle - self._previous_angle).radians)

        new_pose = self._pose.exp(twist)

        self._previous_wheel_positions = wheel_positions.copy()
        self._previous_angle = angle
        self._previous_gyro = gyro_angle
        self._pose = Pose2d(new_pose.translation, angle)

        return self._pose

    def _field_angle(self, gyro_angle):
        anchor_gyro, anchor_rotation = self._anchor
        # Unchanged reading since the last anchor: hand back the anchored
        # heading itself rather than its round-tripped sum
        if gyro_angle.cos == anchor_gyro.cos and gyro_angle.sin == anchor_gyro.sin:
            return anchor_rotation
        return gyro_angle + self._gyro_offset

    @property
    def pose(self):
        """Most recent pose estimate."""
        return self._pose

    def get_pose(self):
        return self._pose

    @property
    def gyro_offset(self):
        """Rotation added to raw gyro readings to get field heading."""
        return self._gyro_offset

    @property
    def x(self):
        """Field-frame X position."""
        return self._pose.x

    @property
    def y(self):
        """Field-frame Y position."""
        return self._pose.y

    @property
    def yaw(self):
        """Field-frame heading angle in radians."""
        return self._pose.rotation.radians

    @property
    def position(self):
        """Field-frame (x, y) tuple."""
        return (self._pose.x, self._pose.y)


OdometryIntegrator = MecanumOdometry
