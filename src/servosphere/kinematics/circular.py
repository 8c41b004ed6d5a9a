"""Circular (angular) arithmetic in degrees.

All bearings are compass-style: measured clockwise from the positive y-axis
and normalized to [0, 360). Turn angles are the shortest signed rotation
from one bearing to the next, normalized to (-180, 180].

NaN inputs propagate to NaN outputs everywhere in this module.
"""

import numpy as np

__all__ = ["bearing_from_xy", "wrap_bearing", "wrap_turn", "circular_mean"]

# Resultant lengths below this are treated as "no mean direction"
RESULTANT_TOLERANCE = 1e-12


def wrap_bearing(angle):
    """Normalize degrees to [0, 360)."""
    wrapped = np.mod(angle, 360.0)
    # np.mod of a tiny negative number rounds up to exactly 360.0
    return np.where(wrapped >= 360.0, 0.0, wrapped)


def wrap_turn(angle):
    """Normalize a signed angle difference (degrees) to (-180, 180].

    Examples
    --------
    >>> float(wrap_turn(10.0 - 350.0))
    20.0
    >>> float(wrap_turn(-180.0))
    180.0
    """
    wrapped = 180.0 - np.mod(180.0 - np.asarray(angle, dtype=float), 360.0)
    return np.where(wrapped <= -180.0, 180.0, wrapped)


def bearing_from_xy(dx, dy):
    """Compass bearing of a displacement, degrees in [0, 360).

    ``atan2(dx, dy)`` gives the angle clockwise from +y. A zero displacement
    has no direction and yields NaN (not 0).
    """
    dx = np.asarray(dx, dtype=float)
    dy = np.asarray(dy, dtype=float)
    bearing = wrap_bearing(np.degrees(np.arctan2(dx, dy)))
    return np.where((dx == 0) & (dy == 0), np.nan, bearing)


def circular_mean(bearings):
    """Circular mean direction and concentration of bearings in degrees.

    Each bearing is treated as a unit vector; the vectors are averaged and
    the resultant's angle and length give the mean direction and rho.

    Parameters
    ----------
    bearings : array-like
        Degrees. NaN values are excluded.

    Returns
    -------
    tuple of (float, float)
        (mean, rho). mean is in [0, 360), rho in [0, 1].

        - No retained samples: (NaN, NaN)
        - One sample, or all samples the same bearing: (that bearing, 1.0)
          exactly
        - Resultant length ~0 (e.g. {0, 180}): (NaN, 0.0), since no
          direction is preferred

    Examples
    --------
    >>> mean, rho = circular_mean([10.0, 350.0])
    >>> round(mean, 6) % 360
    0.0
    """
    values = np.asarray(bearings, dtype=float)
    values = values[np.isfinite(values)]
    if values.size == 0:
        return np.nan, np.nan

    wrapped = wrap_bearing(values)
    if np.ptp(wrapped) == 0:
        return float(wrapped[0]), 1.0

    radians = np.radians(values)
    # Compass convention: x component is sin, y component is cos
    east = float(np.mean(np.sin(radians)))
    north = float(np.mean(np.cos(radians)))
    rho = float(min(np.hypot(east, north), 1.0))

    if rho < RESULTANT_TOLERANCE:
        return np.nan, 0.0

    mean = float(wrap_bearing(np.degrees(np.arctan2(east, north))))
    return mean, rho
