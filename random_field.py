# random_field.py

import logging
import numpy as np
import numba

logger = logging.getLogger("stellar_cycle")

# --- JIT-Compiled Noise Functions ---
# Improved Perlin noise over a seeded permutation table. These are kept outside
# the RandomField class and operate only on NumPy arrays and scalars, as
# required by Numba's nopython mode.

@numba.jit(nopython=True, fastmath=True)
def _fade(t):
    """Perlin fade curve: 6t^5 - 15t^4 + 10t^3"""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


@numba.jit(nopython=True, fastmath=True)
def _lerp(t, a, b):
    return a + t * (b - a)


@numba.jit(nopython=True, fastmath=True)
def _grad(hash_val, x, y, z):
    """Dot product with one of the 12 cube-edge gradient directions."""
    h = hash_val & 15
    u = x if h < 8 else y
    if h < 4:
        v = y
    elif h == 12 or h == 14:
        v = x
    else:
        v = z
    return (u if (h & 1) == 0 else -u) + (v if (h & 2) == 0 else -v)


@numba.jit(nopython=True, fastmath=True)
def _perlin3_jit(perm, x, y, z):
    """Single-octave 3D Perlin noise, roughly in [-1, 1]."""
    fx = np.floor(x)
    fy = np.floor(y)
    fz = np.floor(z)
    xi = int(fx) & 255
    yi = int(fy) & 255
    zi = int(fz) & 255
    x -= fx
    y -= fy
    z -= fz
    u = _fade(x)
    v = _fade(y)
    w = _fade(z)

    a = perm[xi] + yi
    aa = perm[a] + zi
    ab = perm[a + 1] + zi
    b = perm[xi + 1] + yi
    ba = perm[b] + zi
    bb = perm[b + 1] + zi

    return _lerp(w,
                 _lerp(v,
                       _lerp(u, _grad(perm[aa], x, y, z), _grad(perm[ba], x - 1, y, z)),
                       _lerp(u, _grad(perm[ab], x, y - 1, z), _grad(perm[bb], x - 1, y - 1, z))),
                 _lerp(v,
                       _lerp(u, _grad(perm[aa + 1], x, y, z - 1), _grad(perm[ba + 1], x - 1, y, z - 1)),
                       _lerp(u, _grad(perm[ab + 1], x, y - 1, z - 1), _grad(perm[bb + 1], x - 1, y - 1, z - 1))))


@numba.jit(nopython=True, fastmath=True)
def _fractal_noise_jit(perm, x, y, z, octaves, falloff):
    """
    Layered Perlin noise normalized into [0, 1]. Each octave doubles the
    frequency and scales the amplitude by `falloff`.
    """
    total = 0.0
    amplitude = 1.0
    frequency = 1.0
    norm = 0.0
    for _ in range(octaves):
        sample = _perlin3_jit(perm, x * frequency, y * frequency, z * frequency)
        total += amplitude * (sample * 0.5 + 0.5)
        norm += amplitude
        amplitude *= falloff
        frequency *= 2.0
    value = total / norm
    if value < 0.0:
        return 0.0
    if value > 1.0:
        return 1.0
    return value


@numba.jit(nopython=True, fastmath=True)
def _noise_grid_jit(perm, xs, ys, z, octaves, falloff, out):
    """Fills out[i, j] with the noise at (xs[i], ys[j], z)."""
    for i in range(xs.shape[0]):
        for j in range(ys.shape[0]):
            out[i, j] = _fractal_noise_jit(perm, xs[i], ys[j], z, octaves, falloff)


class RandomField:
    """
    The simulation's single source of randomness: uniform samples, 2D vectors,
    palette choices and coherent noise.

    Data Contract:
    - Inputs: seed (int | None) for numpy's default_rng, octave settings for noise.
    - Outputs: floats and tuples; noise() always returns a value in [0, 1].
    - Invariants: Two fields built from the same seed produce identical sequences
      and identical noise.
    """
    def __init__(self, seed=None, octaves: int = 4, falloff: float = 0.5):
        self.seed = seed
        self.rng = np.random.default_rng(seed)
        self.octaves = octaves
        self.falloff = falloff

        # The permutation table is doubled so lookups never need to wrap.
        table = self.rng.permutation(256).astype(np.int64)
        self._perm = np.concatenate([table, table])

        logger.debug(f"RandomField initialized with seed={seed}, octaves={octaves}, falloff={falloff}")

    def uniform(self, low: float = 0.0, high: float = 1.0) -> float:
        return float(self.rng.uniform(low, high))

    def uniform_range(self, bounds) -> float:
        """uniform() with the bounds given as a (low, high) pair from config."""
        return float(self.rng.uniform(bounds[0], bounds[1]))

    def angle(self) -> float:
        return float(self.rng.uniform(0.0, 2 * np.pi))

    def vector(self, low: float = -1.0, high: float = 1.0) -> np.ndarray:
        """A 2D vector with each component drawn from [low, high)."""
        return self.rng.uniform(low, high, size=2)

    def polar(self, radius: float) -> np.ndarray:
        """A 2D vector of the given length pointing in a random direction."""
        theta = self.angle()
        return np.array([np.cos(theta) * radius, np.sin(theta) * radius])

    def choice(self, options):
        return options[int(self.rng.integers(len(options)))]

    def noise(self, x: float, y: float = 0.0, z: float = 0.0) -> float:
        """Coherent noise sample in [0, 1] over 1-3 coordinates."""
        return float(_fractal_noise_jit(self._perm, float(x), float(y), float(z), self.octaves, self.falloff))

    def noise_grid(self, xs: np.ndarray, ys: np.ndarray, z: float) -> np.ndarray:
        """
        Samples noise over the outer product of xs and ys at depth z in one
        compiled pass. Returns an array of shape (len(xs), len(ys)).
        """
        xs = np.ascontiguousarray(xs, dtype=np.float64)
        ys = np.ascontiguousarray(ys, dtype=np.float64)
        out = np.empty((xs.shape[0], ys.shape[0]), dtype=np.float64)
        _noise_grid_jit(self._perm, xs, ys, float(z), self.octaves, self.falloff, out)
        return out
