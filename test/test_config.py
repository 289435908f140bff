"""
Tests for drivetrain configuration and the simulation command line.
"""

import csv
import os

import pytest

from mecanum_odometry.config import (
    CONTROL_PERIOD,
    DEFAULT_WHEEL_MOUNTS,
    DrivetrainConfig,
)
from mecanum_odometry.geometry import Translation2d
from mecanum_odometry.kinematics import MecanumKinematics, SingularConfiguration
from mecanum_odometry.simulate import main


class TestDrivetrainConfig:
    """Building kinematics from configuration."""

    def test_default(self):
        config = DrivetrainConfig.default()
        assert config.control_period == CONTROL_PERIOD
        assert config.front_left == Translation2d(*DEFAULT_WHEEL_MOUNTS['front_left'])
        assert isinstance(config.build_kinematics(), MecanumKinematics)

    def test_from_footprint(self):
        config = DrivetrainConfig.from_footprint(wheel_base=0.5, track_width=0.6)
        assert config.wheel_mounts == (
            Translation2d(0.25, 0.3),
            Translation2d(0.25, -0.3),
            Translation2d(-0.25, 0.3),
            Translation2d(-0.25, -0.3),
        )

    def test_from_dict_with_period(self):
        data = dict(DEFAULT_WHEEL_MOUNTS, control_period=0.01)
        assert DrivetrainConfig.from_dict(data).control_period == 0.01

    def test_from_dict_missing_wheel(self):
        data = dict(DEFAULT_WHEEL_MOUNTS)
        del data['rear_right']
        with pytest.raises(ValueError, match='rear_right'):
            DrivetrainConfig.from_dict(data)

    def test_from_dict_bad_mount(self):
        data = dict(DEFAULT_WHEEL_MOUNTS, front_left=(1.0, 2.0, 3.0))
        with pytest.raises(ValueError, match='front_left'):
            DrivetrainConfig.from_dict(data)

    def test_non_positive_period(self):
        with pytest.raises(ValueError):
            DrivetrainConfig.from_footprint(0.5, 0.5, control_period=0.0)

    def test_degenerate_footprint(self):
        config = DrivetrainConfig.from_footprint(wheel_base=0.0, track_width=0.0)
        with pytest.raises(SingularConfiguration):
            config.build_kinematics()


class TestSimulateCommand:
    """End-to-end run of the simulation script."""

    def test_writes_csv_and_plot(self, tmp_path):
        status = main([
            '--mode', 'x_axis', '--dt', '0.1', '--seed', '3',
            '--output-dir', str(tmp_path), '--no-show',
        ])
        assert status == 0

        csv_path = tmp_path / 'odometry_x_axis.csv'
        assert os.path.exists(tmp_path / 'odometry_x_axis.png')
        with open(csv_path, newline='') as f:
            rows = list(csv.reader(f))
        assert rows[0][:4] == ['time', 'true_x', 'true_y', 'true_heading']
        assert len(rows) > 100
