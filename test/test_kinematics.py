"""
Unit tests for mecanum drive kinematics.
"""

import logging
import math

import numpy as np
import pytest

from mecanum_odometry.geometry import Pose2d, Rotation2d, Translation2d, Twist2d
from mecanum_odometry.kinematics import (
    ChassisSpeeds,
    MecanumKinematics,
    SingularConfiguration,
    WheelPositions,
    WheelSpeeds,
)


@pytest.fixture
def kinematics():
    return MecanumKinematics(
        Translation2d(12, 12), Translation2d(12, -12),
        Translation2d(-12, 12), Translation2d(-12, -12),
    )


def assert_speeds(speeds, expected, abs_tol=0.1):
    np.testing.assert_allclose(speeds.as_array(), expected, atol=abs_tol)


class TestInverseKinematics:
    """Chassis speeds to wheel speeds."""

    def test_straight_line(self, kinematics):
        speeds = kinematics.to_wheel_speeds(ChassisSpeeds(5, 0, 0))
        assert_speeds(speeds, [5.0, 5.0, 5.0, 5.0])

    def test_strafe(self, kinematics):
        speeds = kinematics.to_wheel_speeds(ChassisSpeeds(0, 4, 0))
        assert_speeds(speeds, [-4.0, 4.0, 4.0, -4.0])

    def test_rotation(self, kinematics):
        speeds = kinematics.to_wheel_speeds(ChassisSpeeds(0, 0, 2 * math.pi))
        assert_speeds(speeds, [-150.796, 150.796, -150.796, 150.796])

    def test_mixed(self, kinematics):
        speeds = kinematics.to_wheel_speeds(ChassisSpeeds(2, 3, 1))
        assert_speeds(speeds, [-25.0, 29.0, -19.0, 23.0])

    def test_off_center_rotation(self, kinematics):
        speeds = kinematics.to_wheel_speeds(
            ChassisSpeeds(0, 0, 2 * math.pi), Translation2d(12, 12)
        )
        assert_speeds(speeds, [0.0, 150.796, -150.796, 301.593])

    def test_zero_center_matches_default(self, kinematics):
        chassis = ChassisSpeeds(1, 2, 3)
        assert kinematics.to_wheel_speeds(chassis, Translation2d()) == \
            kinematics.to_wheel_speeds(chassis)

    def test_matrix_rows_follow_roller_axes(self, kinematics):
        np.testing.assert_allclose(kinematics.inverse_matrix, [
            [1, -1, -24],
            [1, 1, 24],
            [1, 1, -24],
            [1, -1, 24],
        ])


class TestForwardKinematics:
    """Wheel speeds to chassis speeds."""

    def test_straight_line(self, kinematics):
        chassis = kinematics.to_chassis_speeds(WheelSpeeds(3.536, 3.536, 3.536, 3.536))
        assert chassis.vx == pytest.approx(3.536)
        assert chassis.vy == pytest.approx(0.0, abs=1e-9)
        assert chassis.omega == pytest.approx(0.0, abs=1e-9)

    def test_strafe(self, kinematics):
        chassis = kinematics.to_chassis_speeds(WheelSpeeds(-2.828427, 2.828427, 2.828427, -2.828427))
        assert chassis.vx == pytest.approx(0.0, abs=1e-9)
        assert chassis.vy == pytest.approx(2.8284, abs=1e-3)
        assert chassis.omega == pytest.approx(0.0, abs=1e-9)

    def test_rotation(self, kinematics):
        chassis = kinematics.to_chassis_speeds(
            WheelSpeeds(-150.79645, 150.79645, -150.79645, 150.79645)
        )
        assert chassis.vx == pytest.approx(0.0, abs=1e-9)
        assert chassis.vy == pytest.approx(0.0, abs=1e-9)
        assert chassis.omega == pytest.approx(2 * math.pi, abs=1e-3)

    def test_inconsistent_wheels_are_averaged(self, kinematics):
        # One wheel slipping forward: no error, least-squares blend
        chassis = kinematics.to_chassis_speeds(WheelSpeeds(1.0, 1.0, 1.0, 2.0))
        assert chassis.vx == pytest.approx(1.25)

    @pytest.mark.parametrize('chassis', [
        ChassisSpeeds(0, 0, 0),
        ChassisSpeeds(1.5, 0, 0),
        ChassisSpeeds(0, -2.0, 0),
        ChassisSpeeds(0, 0, 0.7),
        ChassisSpeeds(1.2, -0.4, 2.5),
    ])
    @pytest.mark.parametrize('mounts', [
        ((12, 12), (12, -12), (-12, 12), (-12, -12)),
        ((0.3, 0.25), (0.3, -0.25), (-0.2, 0.25), (-0.2, -0.25)),
        ((1, 1), (1, -1), (-1, -1), (-1, 1)),
    ])
    def test_round_trip(self, chassis, mounts):
        kinematics = MecanumKinematics(*(Translation2d(x, y) for x, y in mounts))
        recovered = kinematics.to_chassis_speeds(kinematics.to_wheel_speeds(chassis))
        assert recovered.vx == pytest.approx(chassis.vx, abs=1e-9)
        assert recovered.vy == pytest.approx(chassis.vy, abs=1e-9)
        assert recovered.omega == pytest.approx(chassis.omega, abs=1e-9)

    def test_twist_from_position_deltas(self, kinematics):
        start = WheelPositions(1.0, 1.0, 1.0, 1.0)
        end = WheelPositions(4.536, 4.536, 4.536, 4.536)
        twist = kinematics.to_twist_2d(start, end)
        assert twist == Twist2d(3.536, 0.0, 0.0)


class TestConfiguration:
    """Construction-time geometry checks."""

    def test_all_mounts_at_center_rejected(self):
        with pytest.raises(SingularConfiguration):
            MecanumKinematics(Translation2d(), Translation2d(),
                              Translation2d(), Translation2d())

    def test_coincident_mounts_rejected(self, caplog):
        mount = Translation2d(0.5, 0.0)
        with caplog.at_level(logging.ERROR, logger='mecanum_odometry.kinematics'):
            with pytest.raises(SingularConfiguration):
                MecanumKinematics(mount, mount, mount, mount)
        assert 'Degenerate' in caplog.text

    def test_singular_configuration_is_value_error(self):
        assert issubclass(SingularConfiguration, ValueError)

    def test_matrices_are_read_only(self, kinematics):
        with pytest.raises(ValueError):
            kinematics.forward_matrix[0, 0] = 1.0
        with pytest.raises(ValueError):
            kinematics.inverse_matrix[0, 0] = 1.0

    def test_wheel_mounts(self, kinematics):
        assert kinematics.wheel_mounts[1] == Translation2d(12, -12)


class TestWheelValues:
    """Wheel position and speed records."""

    def test_desaturate(self):
        speeds = WheelSpeeds(5, 6, 4, 7).desaturate(5.5)
        factor = 5.5 / 7.0
        assert_speeds(speeds, [5 * factor, 6 * factor, 4 * factor, 7 * factor], 1e-9)

    def test_desaturate_leaves_slow_wheels(self):
        speeds = WheelSpeeds(1, -2, 3, -4).desaturate(5.0)
        assert_speeds(speeds, [1, -2, 3, -4], 1e-12)

    def test_desaturate_negative(self):
        speeds = WheelSpeeds(-5, 6, 4, -7).desaturate(1.0)
        assert max(abs(v) for v in speeds.as_array()) == pytest.approx(1.0)
        assert speeds.rear_right == pytest.approx(-1.0)

    def test_positions_copy_is_independent(self):
        positions = WheelPositions(1, 2, 3, 4)
        copy = positions.copy()
        positions.front_left = 10.0
        assert copy.front_left == 1.0

    def test_positions_minus(self):
        delta = WheelPositions(2, 2, 2, 2).minus(WheelPositions(1, 3, 0, 2))
        assert delta == WheelPositions(1, -1, 2, 0)


class TestChassisSpeeds:
    """Frame conversion and discretization."""

    def test_from_field_relative(self):
        chassis = ChassisSpeeds.from_field_relative(1.0, 0.0, 0.5, Rotation2d.from_degrees(90))
        assert chassis.vx == pytest.approx(0.0, abs=1e-9)
        assert chassis.vy == pytest.approx(-1.0)
        assert chassis.omega == 0.5

    def test_field_relative_round_trip(self):
        heading = Rotation2d.from_degrees(37)
        chassis = ChassisSpeeds.from_field_relative(1.0, -2.0, 0.3, heading)
        vx, vy, omega = chassis.to_field_relative(heading)
        assert (vx, vy, omega) == pytest.approx((1.0, -2.0, 0.3))

    def test_discretize(self):
        target = ChassisSpeeds(1.0, 0.0, 1.0)
        dt = 1.0
        discrete = target.discretize(dt)
        pose = Pose2d().exp(Twist2d(discrete.vx * dt, discrete.vy * dt, discrete.omega * dt))
        assert pose == Pose2d.from_xy(1.0, 0.0, Rotation2d(1.0))

    def test_discretize_without_rotation_is_identity(self):
        discrete = ChassisSpeeds(1.0, 2.0, 0.0).discretize(0.02)
        assert discrete.vx == pytest.approx(1.0)
        assert discrete.vy == pytest.approx(2.0)
        assert discrete.omega == pytest.approx(0.0)
