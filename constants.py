# constants.py

"""
Application Constants

This module defines static configuration values for the application's framework.
These are not expected to change between simulation runs. Tunable simulation
values (thresholds, counts, timers) live in config.json instead.

Data Contract:
- All values are immutable constants.
- Units are specified in comments where applicable.
"""

import math

# Screen dimensions
WIDTH = 1280  # Pixels
HEIGHT = 800  # Pixels

# Framerate
FPS = 60  # Frames per second

# Window Title
TITLE = "Stellar Cycle"

TWO_PI = 2 * math.pi

# Colors (RGB)
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
SPACE_WASH = (5, 5, 5)
EVENT_HORIZON = (0, 0, 0)
HORIZON_RING = (255, 255, 255, 150)
WHITE_DWARF = (235, 240, 255)
COLLAPSE_TINT = (180, 140, 255)
HUD_TEXT = (220, 220, 230)
HUD_DIM = (130, 130, 150)

# Star color spectrum as a series of keyframes keyed by mass fraction.
# Each keyframe is a tuple: (normalized_mass, (R, G, B) color).
STAR_COLOR_KEYFRAMES = [
    (0.0, (255, 100, 50)),    # Red dwarf
    (0.5, (255, 255, 255)),   # White
    (1.0, (100, 180, 255))    # Blue giant
]

# Supernova ejecta colors. The dying star's own color is appended at runtime.
SUPERNOVA_PALETTE = [
    (255, 200, 120),
    (255, 120, 80),
    (180, 200, 255),
    (255, 255, 255)
]

# Messages shown on the END screen, keyed by death branch name.
END_MESSAGES = {
    "BLACK_HOLE": "The star yielded to gravity and became an abyss of darkness.",
    "SUPERNOVA": "The star has fulfilled its role.",
    "NEBULA": "The star has returned to the cosmos."
}

# Ambient noise tint
TINT_RESOLUTION = 100  # Pixels per tint cell
