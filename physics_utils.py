# physics_utils.py

import math
import numpy as np

TWO_PI = 2.0 * math.pi


class PhysicsError(Exception):
    """Custom exception for physics-related errors, including numerical issues."""
    pass


class InputValidationError(PhysicsError, ValueError):
    """Raised when a caller passes physically meaningless inputs (e.g. a negative diameter).

    These represent caller bugs rather than recoverable edge values, so they are
    rejected before any computation starts instead of being clamped.
    """
    pass


def safe_divide(numerator, denominator, epsilon=1e-12, default_on_zero_denom=0.0):
    """
    Safely divides two numbers, handling potential division by zero.

    Args:
        numerator (float or np.ndarray): The number(s) to be divided.
        denominator (float or np.ndarray): The number(s) to divide by.
        epsilon (float): Threshold below which the denominator is considered zero.
        default_on_zero_denom (float): Value used wherever the denominator is effectively zero.

    Returns:
        float or np.ndarray: The quotient, with `default_on_zero_denom` substituted
        where the denominator is near zero.
    """
    if isinstance(denominator, np.ndarray):
        numerator = np.broadcast_to(np.asarray(numerator, dtype=np.float64), denominator.shape)
        is_zero = np.abs(denominator) < epsilon
        result = np.full(denominator.shape, default_on_zero_denom, dtype=np.float64)
        np.divide(numerator, denominator, out=result, where=~is_zero)
        return result
    if abs(denominator) < epsilon:
        return default_on_zero_denom
    return numerator / denominator


def require_positive(name, value):
    """Returns `value` as a float, raising InputValidationError unless it is finite and > 0."""
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise InputValidationError(f"{name} must be a number, got {value!r}.") from e
    if not math.isfinite(value) or value <= 0:
        raise InputValidationError(f"{name} must be a positive finite number, got {value}.")
    return value


def clamp(value, lo, hi):
    return max(lo, min(hi, value))


def wrap_angle_pi(angle_rad):
    """Wraps an angle into (-pi, pi].

    `math.remainder` is exact, so angles already inside the interval come back
    unchanged bit for bit.
    """
    wrapped = math.remainder(angle_rad, TWO_PI)
    if wrapped == -math.pi:
        return math.pi
    return wrapped


def wrap_degrees(angle_deg):
    """Wraps an angle in degrees into [0, 360)."""
    wrapped = math.fmod(angle_deg, 360.0)
    if wrapped < 0:
        wrapped += 360.0
    return wrapped


def rotation_z(angle_rad):
    """Right-handed rotation matrix about the z axis."""
    c, s = math.cos(angle_rad), math.sin(angle_rad)
    return np.array([[c, -s, 0.0],
                     [s, c, 0.0],
                     [0.0, 0.0, 1.0]], dtype=np.float64)


def rotation_x(angle_rad):
    """Right-handed rotation matrix about the x axis."""
    c, s = math.cos(angle_rad), math.sin(angle_rad)
    return np.array([[1.0, 0.0, 0.0],
                     [0.0, c, -s],
                     [0.0, s, c]], dtype=np.float64)
