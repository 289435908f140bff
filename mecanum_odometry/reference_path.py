"""
Reference trajectories for odometry accuracy checks.

Pure math module (no middleware imports). Joins Pose2d waypoints with cubic
Hermite splines whose end tangents follow each waypoint's heading, measures
arc length numerically, and drives the path with a trapezoidal velocity
profile. Sampling a time returns the ground-truth pose, speed, acceleration
and curvature that a simulated robot should be following.

This is tooling for evaluating the estimator, not part of it.
"""

import math
from dataclasses import dataclass

import numpy as np
from scipy.integrate import cumulative_trapezoid
from scipy.interpolate import CubicHermiteSpline

from mecanum_odometry.geometry import Pose2d, Rotation2d

# Tangent length at each waypoint as a multiple of the chord to the next one
TANGENT_SCALE = 1.2


@dataclass(frozen=True)
class PathState:
    """Ground truth at one instant along a reference path."""
    time: float
    pose: Pose2d
    velocity: float
    acceleration: float
    curvature: float


def _segment_samples(start, end, samples):
    """Sample one Hermite segment: positions, headings, curvature, arc length."""
    scale = TANGENT_SCALE * start.translation.distance(end.translation)
    spline = CubicHermiteSpline(
        [0.0, 1.0],
        [[start.x, start.y], [end.x, end.y]],
        [[start.rotation.cos * scale, start.rotation.sin * scale],
         [end.rotation.cos * scale, end.rotation.sin * scale]],
    )
    u = np.linspace(0.0, 1.0, samples)
    points = spline(u)
    d1 = spline(u, 1)
    d2 = spline(u, 2)

    speed = np.hypot(d1[:, 0], d1[:, 1])
    heading = np.arctan2(d1[:, 1], d1[:, 0])
    curvature = (d1[:, 0] * d2[:, 1] - d1[:, 1] * d2[:, 0]) / speed ** 3
    arc_length = cumulative_trapezoid(speed, u, initial=0.0)

    return points, heading, curvature, arc_length


class ReferencePath:
    """A time-parameterised path through a list of waypoints.

    Use from_waypoints() rather than the constructor.

    Args:
        distance: (N,) increasing arc length at each sample.
        points: (N, 2) positions.
        heading: (N,) unwrapped heading in radians.
        curvature: (N,) signed curvature.
        max_velocity: Cruise speed of the velocity profile.
        max_acceleration: Acceleration and deceleration of the profile.
    """

    def __init__(self, distance, points, heading, curvature,
                 max_velocity, max_acceleration):
        if max_velocity <= 0 or max_acceleration <= 0:
            raise ValueError(
                f'velocity and acceleration limits must be positive, '
                f'got {max_velocity}, {max_acceleration}'
            )
        self._distance = distance
        self._points = points
        self._heading = heading
        self._curvature = curvature
        self._max_velocity = max_velocity
        self._max_acceleration = max_acceleration

        length = distance[-1]
        ramp_time = max_velocity / max_acceleration
        ramp_distance = 0.5 * max_acceleration * ramp_time ** 2
        if 2.0 * ramp_distance > length:
            # Never reaches cruise speed: triangular profile
            ramp_time = math.sqrt(length / max_acceleration)
            self._peak_velocity = max_acceleration * ramp_time
            self._cruise_time = 0.0
        else:
            self._peak_velocity = max_velocity
            self._cruise_time = (length - 2.0 * ramp_distance) / max_velocity
        self._ramp_time = ramp_time

    @classmethod
    def from_waypoints(cls, waypoints, max_velocity, max_acceleration,
                       samples_per_segment=2000):
        """Build a path through at least two Pose2d waypoints.

        Args:
            waypoints: Sequence of Pose2d; each heading sets the direction
                of travel through that waypoint.
            max_velocity: Cruise speed.
            max_acceleration: Acceleration limit at start and end.
            samples_per_segment: Spline samples used for arc length.

        Returns:
            ReferencePath instance.
        """
        if len(waypoints) < 2:
            raise ValueError('a reference path needs at least two waypoints')

        distances, points, headings, curvatures = [], [], [], []
        offset = 0.0
        for i, (start, end) in enumerate(zip(waypoints[:-1], waypoints[1:])):
            seg_points, seg_heading, seg_curvature, seg_length = _segment_samples(
                start, end, samples_per_segment
            )
            # Segments share their joining sample
            first = 0 if i == 0 else 1
            distances.append(seg_length[first:] + offset)
            points.append(seg_points[first:])
            headings.append(seg_heading[first:])
            curvatures.append(seg_curvature[first:])
            offset += seg_length[-1]

        return cls(
            np.concatenate(distances),
            np.concatenate(points),
            np.unwrap(np.concatenate(headings)),
            np.concatenate(curvatures),
            max_velocity,
            max_acceleration,
        )

    @property
    def length(self):
        return float(self._distance[-1])

    @property
    def total_time(self):
        return 2.0 * self._ramp_time + self._cruise_time

    def _profile(self, t):
        """(distance, velocity, acceleration) of the trapezoid at time t."""
        a = self._max_acceleration
        v = self._peak_velocity
        ramp = self._ramp_time
        cruise_end = ramp + self._cruise_time

        if t <= 0.0:
            return 0.0, 0.0, 0.0
        if t < ramp:
            return 0.5 * a * t * t, a * t, a
        ramp_distance = 0.5 * a * ramp * ramp
        if t < cruise_end:
            return ramp_distance + v * (t - ramp), v, 0.0
        if t < self.total_time:
            td = t - cruise_end
            distance = ramp_distance + v * self._cruise_time + v * td - 0.5 * a * td * td
            return distance, v - a * td, -a
        return self.length, 0.0, 0.0

    def sample(self, t):
        """Ground-truth PathState at time t (clamped to the path ends)."""
        distance, velocity, acceleration = self._profile(t)
        x = np.interp(distance, self._distance, self._points[:, 0])
        y = np.interp(distance, self._distance, self._points[:, 1])
        heading = np.interp(distance, self._distance, self._heading)
        curvature = np.interp(distance, self._distance, self._curvature)
        return PathState(
            time=t,
            pose=Pose2d.from_xy(float(x), float(y), Rotation2d(float(heading))),
            velocity=velocity,
            acceleration=acceleration,
            curvature=float(curvature),
        )
