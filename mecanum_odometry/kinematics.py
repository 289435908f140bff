"""
Four-wheel mecanum / omni drive kinematics.

Pure Python module (no middleware imports). Relates chassis motion
(vx, vy, omega) to the motion of four independently driven wheels. Each
wheel only measures the component of the rigid-body velocity at its mount
point that lies along its roller axis, so the inverse kinematics is a
4x3 matrix. The forward direction is over-determined and is solved in the
least-squares sense with a pseudoinverse computed once at construction.

Wheel order everywhere is front-left, front-right, rear-left, rear-right.
"""

import logging
from dataclasses import dataclass

import numpy as np

from mecanum_odometry.geometry import Pose2d, Rotation2d, Translation2d, Twist2d

logger = logging.getLogger(__name__)

# Ratio of smallest to largest singular value below which a layout is rejected
CONDITION_THRESHOLD = 1e-9

# Direction each wheel's rollers push the chassis (fl, fr, rl, rr)
ROLLER_AXES = np.array([
    [1.0, -1.0],
    [1.0, 1.0],
    [1.0, 1.0],
    [1.0, -1.0],
])


class SingularConfiguration(ValueError):
    """Wheel mounts do not determine chassis motion (degenerate layout)."""


@dataclass
class WheelPositions:
    """Cumulative distance travelled by each wheel."""
    front_left: float = 0.0
    front_right: float = 0.0
    rear_left: float = 0.0
    rear_right: float = 0.0

    def as_array(self):
        return np.array([self.front_left, self.front_right,
                         self.rear_left, self.rear_right])

    def copy(self):
        return WheelPositions(self.front_left, self.front_right,
                              self.rear_left, self.rear_right)

    def minus(self, other):
        """Per-wheel distance travelled since the other snapshot."""
        return WheelPositions(
            self.front_left - other.front_left,
            self.front_right - other.front_right,
            self.rear_left - other.rear_left,
            self.rear_right - other.rear_right,
        )


@dataclass
class WheelSpeeds:
    """Instantaneous velocity of each wheel."""
    front_left: float = 0.0
    front_right: float = 0.0
    rear_left: float = 0.0
    rear_right: float = 0.0

    def as_array(self):
        return np.array([self.front_left, self.front_right,
                         self.rear_left, self.rear_right])

    def desaturate(self, max_speed):
        """Scale all wheels down so none exceeds max_speed, keeping ratios."""
        real_max = float(np.max(np.abs(self.as_array())))
        if real_max <= max_speed:
            return WheelSpeeds(*self.as_array())
        return WheelSpeeds(*(self.as_array() / real_max * max_speed))


@dataclass
class ChassisSpeeds:
    """Robot-relative velocity.

    Attributes:
        vx: Forward velocity.
        vy: Leftward velocity.
        omega: Counter-clockwise angular velocity in rad/s.
    """
    vx: float = 0.0
    vy: float = 0.0
    omega: float = 0.0

    @classmethod
    def from_field_relative(cls, vx, vy, omega, robot_angle):
        """Convert a field-relative velocity into the robot frame.

        Args:
            vx, vy: Velocity along the field axes.
            omega: Angular velocity in rad/s.
            robot_angle: Current field heading of the robot (Rotation2d).
        """
        rotated = Translation2d(vx, vy).rotate_by(-robot_angle)
        return cls(rotated.x, rotated.y, omega)

    def to_field_relative(self, robot_angle):
        """Return (vx, vy, omega) expressed along the field axes."""
        rotated = Translation2d(self.vx, self.vy).rotate_by(robot_angle)
        return rotated.x, rotated.y, self.omega

    def discretize(self, dt):
        """Correct a command for the arc a constant twist traces over dt.

        Returns the speeds that, applied for dt and integrated with the
        exponential map, land on the pose a straight (vx, vy) move would
        reach while rotating by omega * dt.
        """
        desired = Pose2d(Translation2d(self.vx * dt, self.vy * dt),
                         Rotation2d(self.omega * dt))
        twist = Pose2d().log(desired)
        return ChassisSpeeds(twist.dx / dt, twist.dy / dt, twist.dtheta / dt)


def _inverse_kinematics_matrix(mounts):
    """Build the 4x3 chassis-to-wheel matrix for the given mount points."""
    rows = []
    for axis, mount in zip(ROLLER_AXES, mounts):
        # Rigid-body velocity at the mount: v + omega x r
        velocity_field = np.array([
            [1.0, 0.0, -mount.y],
            [0.0, 1.0, mount.x],
        ])
        rows.append(axis @ velocity_field)
    return np.array(rows)


class MecanumKinematics:
    """Kinematics for a four-wheel mecanum (or X-configured omni) chassis.

    Args:
        front_left, front_right, rear_left, rear_right: Translation2d
            positions of each wheel relative to the chassis center.

    Raises:
        SingularConfiguration: The mounts cannot resolve all three chassis
            degrees of freedom (for example, all four coincide).
    """

    def __init__(self, front_left, front_right, rear_left, rear_right):
        self._mounts = (front_left, front_right, rear_left, rear_right)
        self._inverse = _inverse_kinematics_matrix(self._mounts)

        singular_values = np.linalg.svd(self._inverse, compute_uv=False)
        if singular_values[-1] <= singular_values[0] * CONDITION_THRESHOLD:
            logger.error(
                f'Degenerate wheel layout {self._mounts}: '
                f'singular values {singular_values}'
            )
            raise SingularConfiguration(
                f'wheel mounts {self._mounts} do not determine chassis motion'
            )

        self._forward = np.linalg.pinv(self._inverse)
        self._inverse.setflags(write=False)
        self._forward.setflags(write=False)

        logger.debug(
            f'Kinematics ready: mounts={self._mounts}, '
            f'condition={singular_values[0] / singular_values[-1]:.3g}'
        )

    @property
    def wheel_mounts(self):
        """(front_left, front_right, rear_left, rear_right) mount points."""
        return self._mounts

    @property
    def inverse_matrix(self):
        """Read-only 4x3 chassis-to-wheel matrix."""
        return self._inverse

    @property
    def forward_matrix(self):
        """Read-only 3x4 least-squares wheel-to-chassis matrix."""
        return self._forward

    def to_wheel_speeds(self, chassis_speeds, center_of_rotation=None):
        """Wheel speeds that produce the requested chassis motion.

        Args:
            chassis_speeds: Desired ChassisSpeeds.
            center_of_rotation: Optional Translation2d the chassis should
                rotate about. Defaults to the chassis center.

        Returns:
            WheelSpeeds for front-left, front-right, rear-left, rear-right.
        """
        matrix = self._inverse
        if center_of_rotation is not None and center_of_rotation.norm > 0.0:
            matrix = _inverse_kinematics_matrix(
                [mount - center_of_rotation for mount in self._mounts]
            )
        chassis = np.array([chassis_speeds.vx, chassis_speeds.vy,
                            chassis_speeds.omega])
        return WheelSpeeds(*(matrix @ chassis))

    def to_chassis_speeds(self, wheel_speeds):
        """Least-squares chassis motion for the measured wheel speeds.

        Inconsistent readings (e.g. one slipping wheel) are averaged into
        the result; nothing is flagged.
        """
        vx, vy, omega = self._forward @ wheel_speeds.as_array()
        return ChassisSpeeds(float(vx), float(vy), float(omega))

    def to_twist_2d(self, start, end):
        """Robot-relative twist implied by wheel travel from start to end.

        Treats the position delta over one tick as a constant velocity, so
        the same operator that maps wheel speeds to chassis speeds maps
        wheel distance deltas to a twist.
        """
        dx, dy, dtheta = self._forward @ end.minus(start).as_array()
        return Twist2d(dx, dy, dtheta)

    def __repr__(self):
        fl, fr, rl, rr = self._mounts
        return (f'MecanumKinematics(front_left={fl}, front_right={fr}, '
                f'rear_left={rl}, rear_right={rr})')
