"""Wheel + gyro odometry for four-wheel mecanum drivetrains."""

from mecanum_odometry.geometry import Pose2d, Rotation2d, Translation2d, Twist2d
from mecanum_odometry.kinematics import (
    ChassisSpeeds,
    MecanumKinematics,
    SingularConfiguration,
    WheelPositions,
    WheelSpeeds,
)
from mecanum_odometry.odometry import MecanumOdometry, OdometryIntegrator

__version__ = '0.1.0'
