# canvas.py

import numpy as np
import pygame


def _rgba(color):
    """Clamps a color to valid 0-255 integer channels, adding full alpha to RGB."""
    channels = [int(round(float(np.clip(c, 0, 255)))) for c in color]
    if len(channels) == 3:
        channels.append(255)
    return tuple(channels)


class PygameCanvas:
    """
    Drawing surface used by the simulation core.

    pygame.draw writes alpha into the target rather than blending it, so
    translucent shapes are drawn onto a temporary SRCALPHA surface sized to
    the shape's bounding box and then blitted. Opaque shapes are drawn
    directly. Colors outside 0-255 are clamped here; fully transparent
    shapes are skipped.

    set_offset() translates every following draw call (used for screen shake);
    overlay() always covers the whole surface regardless of the offset.
    """
    def __init__(self, surface: pygame.Surface):
        self.surface = surface
        self.offset = (0.0, 0.0)
        self._overlay = pygame.Surface(surface.get_size(), pygame.SRCALPHA)

    def set_offset(self, dx: float, dy: float):
        self.offset = (float(dx), float(dy))

    def _shift(self, x, y):
        return x + self.offset[0], y + self.offset[1]

    def background(self, color):
        self.surface.fill(_rgba(color)[:3])

    def overlay(self, color):
        rgba = _rgba(color)
        if rgba[3] == 0:
            return
        self._overlay.fill(rgba)
        self.surface.blit(self._overlay, (0, 0))

    def _blit_shape(self, rgba, left, top, w, h, draw_fn):
        """Draws via draw_fn(target, ox, oy, color) on a temp surface when translucent."""
        if rgba[3] == 255:
            draw_fn(self.surface, 0, 0, rgba)
            return
        w, h = max(1, int(np.ceil(w))), max(1, int(np.ceil(h)))
        left, top = int(np.floor(left)), int(np.floor(top))
        temp = pygame.Surface((w, h), pygame.SRCALPHA)
        draw_fn(temp, -left, -top, rgba)
        self.surface.blit(temp, (left, top))

    def circle(self, center, radius: float, color, width: int = 0):
        rgba = _rgba(color)
        if rgba[3] == 0 or radius <= 0:
            return
        cx, cy = self._shift(float(center[0]), float(center[1]))
        r = max(1, int(round(radius)))
        pad = r + width + 1

        def draw(target, ox, oy, c):
            pygame.draw.circle(target, c, (int(round(cx + ox)), int(round(cy + oy))), r, width)

        self._blit_shape(rgba, cx - pad, cy - pad, 2 * pad, 2 * pad, draw)

    def polygon(self, points, color, width: int = 0):
        rgba = _rgba(color)
        if rgba[3] == 0 or len(points) < 3:
            return
        shifted = [self._shift(float(px), float(py)) for px, py in points]
        xs = [p[0] for p in shifted]
        ys = [p[1] for p in shifted]
        left, top = min(xs) - 1, min(ys) - 1

        def draw(target, ox, oy, c):
            pygame.draw.polygon(target, c, [(px + ox, py + oy) for px, py in shifted], width)

        self._blit_shape(rgba, left, top, max(xs) - left + 2, max(ys) - top + 2, draw)

    def line(self, start, end, color, width: int = 1):
        rgba = _rgba(color)
        if rgba[3] == 0:
            return
        x1, y1 = self._shift(float(start[0]), float(start[1]))
        x2, y2 = self._shift(float(end[0]), float(end[1]))
        left, top = min(x1, x2) - width, min(y1, y2) - width

        def draw(target, ox, oy, c):
            pygame.draw.line(target, c, (x1 + ox, y1 + oy), (x2 + ox, y2 + oy), width)

        self._blit_shape(rgba, left, top, abs(x2 - x1) + 2 * width + 1, abs(y2 - y1) + 2 * width + 1, draw)

    def rect(self, x: float, y: float, w: float, h: float, color):
        rgba = _rgba(color)
        if rgba[3] == 0:
            return
        x, y = self._shift(float(x), float(y))
        if rgba[3] == 255:
            self.surface.fill(rgba[:3], pygame.Rect(int(x), int(y), int(w), int(h)))
            return
        temp = pygame.Surface((max(1, int(w)), max(1, int(h))), pygame.SRCALPHA)
        temp.fill(rgba)
        self.surface.blit(temp, (int(x), int(y)))
