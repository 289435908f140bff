"""
Planar geometry value types for pose estimation.

Pure Python module (no middleware imports). Provides immutable 2D
translations, rotations, poses and twists. Rotations are stored as a unit
(cos, sin) pair so that composition never has to wrap angles by hand, and
poses integrate twists with the SE(2) exponential map so a constant twist
over one tick traces an exact arc instead of a straight chord.

Equality is tolerance-based (EQUALITY_TOLERANCE): two values built through
different but equivalent arithmetic compare equal.
"""

import logging
import math

logger = logging.getLogger(__name__)

EQUALITY_TOLERANCE = 1e-9

# Below this |dtheta| the exponential map switches to its series expansion
EPSILON = 1e-9


class Translation2d:
    """A point or displacement in the plane.

    Args:
        x: X component (forward on the robot, along the field X axis).
        y: Y component (left on the robot, along the field Y axis).
    """

    __slots__ = ('_x', '_y')

    def __init__(self, x=0.0, y=0.0):
        self._x = float(x)
        self._y = float(y)

    @property
    def x(self):
        return self._x

    @property
    def y(self):
        return self._y

    @property
    def norm(self):
        """Distance from the origin."""
        return math.hypot(self._x, self._y)

    @property
    def angle(self):
        """Direction of this vector as a Rotation2d."""
        return Rotation2d.from_components(self._x, self._y)

    def distance(self, other):
        """Euclidean distance to another translation."""
        return math.hypot(other.x - self._x, other.y - self._y)

    def rotate_by(self, rotation):
        """Rotate this vector counter-clockwise about the origin."""
        return Translation2d(
            self._x * rotation.cos - self._y * rotation.sin,
            self._x * rotation.sin + self._y * rotation.cos,
        )

    def interpolate(self, end, t):
        """Linear interpolation toward end, with t clamped to [0, 1]."""
        t = min(max(t, 0.0), 1.0)
        return Translation2d(
            self._x + (end.x - self._x) * t,
            self._y + (end.y - self._y) * t,
        )

    def __add__(self, other):
        return Translation2d(self._x + other.x, self._y + other.y)

    def __sub__(self, other):
        return Translation2d(self._x - other.x, self._y - other.y)

    def __neg__(self):
        return Translation2d(-self._x, -self._y)

    def __mul__(self, scalar):
        return Translation2d(self._x * scalar, self._y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar):
        return Translation2d(self._x / scalar, self._y / scalar)

    def __iter__(self):
        yield self._x
        yield self._y

    def __eq__(self, other):
        if not isinstance(other, Translation2d):
            return NotImplemented
        return (abs(self._x - other.x) < EQUALITY_TOLERANCE
                and abs(self._y - other.y) < EQUALITY_TOLERANCE)

    __hash__ = None

    def __repr__(self):
        return f'Translation2d(x={self._x:.4f}, y={self._y:.4f})'


class Rotation2d:
    """A heading in the plane, kept as a normalized (cos, sin) pair.

    Args:
        radians: Angle in radians. Any real value is accepted; the stored
            angle is wrapped to [-pi, pi]. Non-finite input gives a NaN
            rotation.
    """

    __slots__ = ('_cos', '_sin', '_radians')

    def __init__(self, radians=0.0):
        if math.isinf(radians):
            # math.cos rejects infinities; carry them on as NaN
            radians = math.nan
        self._cos = math.cos(radians)
        self._sin = math.sin(radians)
        self._radians = math.atan2(self._sin, self._cos)

    @classmethod
    def from_components(cls, x, y):
        """Build the rotation pointing along the vector (x, y).

        A vector too short to define a direction yields the zero rotation.
        """
        magnitude = math.hypot(x, y)
        rotation = cls.__new__(cls)
        if magnitude > 1e-6 or math.isnan(magnitude):
            rotation._cos = x / magnitude
            rotation._sin = y / magnitude
        else:
            logger.warning(
                f'x and y components of Rotation2d are zero ({x}, {y}); '
                f'using the zero rotation'
            )
            rotation._cos = 1.0
            rotation._sin = 0.0
        rotation._radians = math.atan2(rotation._sin, rotation._cos)
        return rotation

    @classmethod
    def from_degrees(cls, degrees):
        return cls(math.radians(degrees))

    @property
    def radians(self):
        return self._radians

    @property
    def degrees(self):
        return math.degrees(self._radians)

    @property
    def cos(self):
        return self._cos

    @property
    def sin(self):
        return self._sin

    def rotate_by(self, other):
        """Compose this rotation with another (angle addition)."""
        return Rotation2d.from_components(
            self._cos * other.cos - self._sin * other.sin,
            self._cos * other.sin + self._sin * other.cos,
        )

    def interpolate(self, end, t):
        """Interpolate along the shortest arc toward end."""
        t = min(max(t, 0.0), 1.0)
        return self + (end - self) * t

    def __add__(self, other):
        return self.rotate_by(other)

    def __sub__(self, other):
        # Result angle lies in [-pi, pi]: the shortest signed difference
        return self.rotate_by(-other)

    def __neg__(self):
        return Rotation2d.from_components(self._cos, -self._sin)

    def __mul__(self, scalar):
        return Rotation2d(self._radians * scalar)

    __rmul__ = __mul__

    def __eq__(self, other):
        if not isinstance(other, Rotation2d):
            return NotImplemented
        return math.hypot(self._cos - other.cos,
                          self._sin - other.sin) < EQUALITY_TOLERANCE

    __hash__ = None

    def __repr__(self):
        return f'Rotation2d(degrees={self.degrees:.4f})'


class Twist2d:
    """Robot-relative displacement over one tick.

    Args:
        dx: Forward displacement.
        dy: Leftward displacement.
        dtheta: Heading change in radians (counter-clockwise positive).
    """

    __slots__ = ('_dx', '_dy', '_dtheta')

    def __init__(self, dx=0.0, dy=0.0, dtheta=0.0):
        self._dx = float(dx)
        self._dy = float(dy)
        self._dtheta = float(dtheta)

    @property
    def dx(self):
        return self._dx

    @property
    def dy(self):
        return self._dy

    @property
    def dtheta(self):
        return self._dtheta

    def __mul__(self, scalar):
        return Twist2d(self._dx * scalar, self._dy * scalar,
                       self._dtheta * scalar)

    __rmul__ = __mul__

    def __eq__(self, other):
        if not isinstance(other, Twist2d):
            return NotImplemented
        return (abs(self._dx - other.dx) < EQUALITY_TOLERANCE
                and abs(self._dy - other.dy) < EQUALITY_TOLERANCE
                and abs(self._dtheta - other.dtheta) < EQUALITY_TOLERANCE)

    __hash__ = None

    def __repr__(self):
        return (f'Twist2d(dx={self._dx:.4f}, dy={self._dy:.4f}, '
                f'dtheta={self._dtheta:.4f})')


class Pose2d:
    """Field-relative robot pose: a translation plus a heading.

    Args:
        translation: Position on the field.
        rotation: Heading on the field.
    """

    __slots__ = ('_translation', '_rotation')

    def __init__(self, translation=None, rotation=None):
        self._translation = translation if translation is not None else Translation2d()
        self._rotation = rotation if rotation is not None else Rotation2d()

    @classmethod
    def from_xy(cls, x, y, rotation=None):
        return cls(Translation2d(x, y), rotation)

    @property
    def translation(self):
        return self._translation

    @property
    def rotation(self):
        return self._rotation

    @property
    def x(self):
        return self._translation.x

    @property
    def y(self):
        return self._translation.y

    def transform_by(self, translation, rotation):
        """Apply a robot-relative move: translate in this pose's frame, then turn."""
        return Pose2d(
            self._translation + translation.rotate_by(self._rotation),
            self._rotation + rotation,
        )

    def relative_to(self, other):
        """Express this pose in the frame of another pose."""
        return Pose2d(
            (self._translation - other.translation).rotate_by(-other.rotation),
            self._rotation - other.rotation,
        )

    def exp(self, twist):
        """Integrate a constant twist along the arc it describes.

        Uses the SE(2) exponential map. For |dtheta| below EPSILON the
        closed-form sin(x)/x and (1 - cos(x))/x terms are replaced with their
        series expansions to avoid dividing by a vanishing angle.

        Args:
            twist: Robot-relative Twist2d for one tick.

        Returns:
            The Pose2d reached after following the twist from this pose.
        """
        dx, dy, dtheta = twist.dx, twist.dy, twist.dtheta
        sin_theta = math.sin(dtheta)
        cos_theta = math.cos(dtheta)

        if abs(dtheta) < EPSILON:
            s = 1.0 - dtheta * dtheta / 6.0
            c = 0.5 * dtheta
        else:
            s = sin_theta / dtheta
            c = (1.0 - cos_theta) / dtheta

        return self.transform_by(
            Translation2d(dx * s - dy * c, dx * c + dy * s),
            Rotation2d.from_components(cos_theta, sin_theta),
        )

    def log(self, end):
        """Return the twist that exp() maps from this pose to end."""
        transform = end.relative_to(self)
        dtheta = transform.rotation.radians
        half_dtheta = dtheta / 2.0
        cos_minus_one = transform.rotation.cos - 1.0

        if abs(cos_minus_one) < EPSILON:
            half_theta_by_tan_half = 1.0 - dtheta * dtheta / 12.0
        else:
            half_theta_by_tan_half = -(half_dtheta * transform.rotation.sin) / cos_minus_one

        translation = transform.translation.rotate_by(
            Rotation2d.from_components(half_theta_by_tan_half, -half_dtheta)
        ) * math.hypot(half_theta_by_tan_half, half_dtheta)

        return Twist2d(translation.x, translation.y, dtheta)

    def interpolate(self, end, t):
        """Interpolate along the constant-twist arc from this pose to end."""
        if t <= 0.0:
            return self
        if t >= 1.0:
            return end
        return self.exp(self.log(end) * t)

    def __eq__(self, other):
        if not isinstance(other, Pose2d):
            return NotImplemented
        return (self._translation == other.translation
                and self._rotation == other.rotation)

    __hash__ = None

    def __repr__(self):
        return (f'Pose2d(x={self.x:.4f}, y={self.y:.4f}, '
                f'degrees={self._rotation.degrees:.4f})')
