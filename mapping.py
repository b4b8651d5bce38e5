# mapping.py

"""
Linear mapping and color interpolation helpers shared by the star, the
particles and the universe.

None of these clamp unless asked to: out-of-range inputs extrapolate along
the same line, so a mass of 120 simply yields a bigger, longer-lived star.
"""

import numpy as np


def remap(value: float, in_min: float, in_max: float, out_min: float, out_max: float) -> float:
    """Maps value from [in_min, in_max] onto [out_min, out_max] (unclamped)."""
    return out_min + (out_max - out_min) * ((value - in_min) / (in_max - in_min))


def remap_range(value: float, in_min: float, in_max: float, out_range) -> float:
    """remap() with the output bounds given as a (min, max) pair from config."""
    return remap(value, in_min, in_max, out_range[0], out_range[1])


def lerp_color(color1, color2, t: float) -> tuple:
    """
    Blends two RGB colors. t is clamped to [0, 1] so the result stays a
    valid blend of the two endpoints.
    """
    t = float(np.clip(t, 0.0, 1.0))
    return tuple(c1 * (1 - t) + c2 * t for c1, c2 in zip(color1, color2))


def interpolate_keyframes(keyframes, position: float) -> tuple:
    """
    Calculates a smooth color by linearly interpolating between keyframes.

    - Inputs:
        - keyframes: sequence of (normalized_position, (R, G, B)) sorted by position.
        - position (float): clamped to the first/last keyframe position.
    - Outputs: (R, G, B) as floats.
    """
    position = float(np.clip(position, keyframes[0][0], keyframes[-1][0]))

    # Find the two keyframes the position falls between.
    for i in range(len(keyframes) - 1):
        pos1, color1 = keyframes[i]
        pos2, color2 = keyframes[i + 1]

        if pos1 <= position <= pos2:
            local_t = (position - pos1) / (pos2 - pos1)
            return lerp_color(color1, color2, local_t)

    return tuple(float(c) for c in keyframes[-1][1])
