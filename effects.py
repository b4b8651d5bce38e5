# effects.py

"""Single-instance special effects left behind by a star's death."""

import numpy as np

import constants


class WhiteDwarf:
    """A small bright core that fades linearly over a long duration."""
    def __init__(self, position, size: float, fade_frames: int, color=constants.WHITE_DWARF):
        self.position = np.array(position, dtype=float)
        self.size = size
        self.color = tuple(color)
        self.fade_frames = fade_frames
        self.remaining = float(fade_frames)

    @property
    def alpha(self):
        return 255.0 * self.remaining / self.fade_frames

    @property
    def finished(self):
        return self.remaining <= 0

    def update(self):
        self.remaining = max(0.0, self.remaining - 1)

    def draw(self, canvas):
        if self.finished:
            return
        alpha = self.alpha
        canvas.circle(self.position, self.size * 2, (*self.color, alpha / 8))
        canvas.circle(self.position, self.size, (*self.color, alpha / 3))
        canvas.circle(self.position, self.size / 2, (*self.color, alpha))


class CollapseFlare:
    """
    The visual of a gravitational collapse: a disc that expands to its full
    radius over `grow_frames`, then fades out over `fade_frames`.
    """
    def __init__(self, position, max_radius: float, color, grow_frames: int, fade_frames: int):
        self.position = np.array(position, dtype=float)
        self.max_radius = max_radius
        self.color = tuple(color)
        self.grow_frames = grow_frames
        self.fade_frames = fade_frames
        self.age = 0

    @property
    def radius(self):
        return self.max_radius * min(1.0, self.age / self.grow_frames)

    @property
    def alpha(self):
        fading_for = self.age - self.grow_frames
        if fading_for <= 0:
            return 200.0
        return max(0.0, 200.0 * (1 - fading_for / self.fade_frames))

    @property
    def finished(self):
        return self.age >= self.grow_frames + self.fade_frames

    def update(self):
        self.age += 1

    def draw(self, canvas):
        if self.finished:
            return
        alpha = self.alpha
        radius = self.radius
        canvas.circle(self.position, radius, (*self.color, alpha / 4))
        canvas.circle(self.position, radius * 0.6, (*constants.COLLAPSE_TINT, alpha / 3))
        canvas.circle(self.position, radius, (*self.color, alpha / 2), width=2)
