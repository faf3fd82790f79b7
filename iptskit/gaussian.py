"""Gaussian fitting of touch clusters in a capacitive heatmap."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

# The smallest magnitudes treated as non-zero, by float precision.
_EPS_SINGLE = 1e-20
_EPS_DOUBLE = 1e-40


def _as_float(values) -> np.ndarray:
    arr = np.array(values, copy=True)
    if not np.issubdtype(arr.dtype, np.floating):
        arr = arr.astype(np.float64)
    return arr


@dataclass(frozen=True)
class Box:
    """An axis aligned pixel box with inclusive bounds."""

    x_min: int
    y_min: int
    x_max: int
    y_max: int

    @property
    def is_empty(self) -> bool:
        return self.x_min > self.x_max or self.y_min > self.y_max

    @property
    def size(self) -> tuple[int, int]:
        """Width and height in pixels, bounds included."""
        return (self.x_max - self.x_min + 1, self.y_max - self.y_min + 1)

    @property
    def center(self) -> np.ndarray:
        return np.array(
            [(self.x_min + self.x_max) / 2.0, (self.y_min + self.y_max) / 2.0]
        )

    @property
    def slices(self) -> tuple[slice, slice]:
        """Row and column slices selecting the box from an image."""
        return (
            slice(self.y_min, self.y_max + 1),
            slice(self.x_min, self.x_max + 1),
        )


@dataclass
class Parameters:
    """State of one gaussian that is fitted onto a cluster."""

    bounds: Box
    valid: bool = False
    scale: float = 0.0
    mean: np.ndarray = field(default_factory=lambda: np.zeros(2))
    prec: np.ndarray = field(default_factory=lambda: np.eye(2))
    weights: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        self.mean = _as_float(self.mean).reshape(2)
        self.prec = _as_float(self.prec).reshape(2, 2)
        if self.weights is None:
            width, height = self.bounds.size
            self.weights = np.zeros((height, width))
        else:
            self.weights = _as_float(self.weights)


def _scaled_grid(bounds: Box, shape: tuple[int, ...]) -> tuple[np.ndarray, np.ndarray]:
    """Coordinates of the box pixels mapped from the image onto [-1, 1]."""
    rows, cols = shape[:2]
    xs = np.arange(bounds.x_min, bounds.x_max + 1) * (2.0 / cols) - 1.0
    ys = np.arange(bounds.y_min, bounds.y_max + 1) * (2.0 / rows) - 1.0
    return np.meshgrid(xs, ys)


def gaussian_like(x: Sequence[float], mean: Sequence[float], prec) -> float:
    """Unnormalized 2D gaussian density at ``x``."""
    vec = np.asarray(x, dtype=float) - np.asarray(mean, dtype=float)
    vtmv = float(vec @ np.asarray(prec, dtype=float) @ vec)
    return math.exp(-vtmv) / 2.0


def _gaussian_grid(xs: np.ndarray, ys: np.ndarray, mean: np.ndarray, prec: np.ndarray) -> np.ndarray:
    dx = xs - mean[0]
    dy = ys - mean[1]
    vtmv = prec[0, 0] * dx * dx + (prec[0, 1] + prec[1, 0]) * dx * dy + prec[1, 1] * dy * dy
    return np.exp(-vtmv) / 2.0


def assemble_system(bounds: Box, data, weights) -> tuple[np.ndarray, np.ndarray]:
    """Build the weighted least squares system for a log-quadratic fit.

    Returns the 6x6 system matrix and the right hand side vector.
    """
    data = np.asarray(data)
    weights = _as_float(weights)
    eps = _EPS_SINGLE if weights.dtype == np.float32 else _EPS_DOUBLE

    xs, ys = _scaled_grid(bounds, data.shape)
    d = weights * data[bounds.slices]
    v = np.log(d + eps) * d * d

    basis = np.stack([xs * xs, xs * ys, ys * ys, xs, ys, np.ones_like(xs)])
    flat = basis.reshape(6, -1)
    dd = (d * d).reshape(-1)

    rhs = flat @ v.reshape(-1)
    m = (flat * dd) @ flat.T
    m[1, :] *= 2
    return m, rhs


def extract_params(chi) -> Optional[tuple[float, np.ndarray, np.ndarray]]:
    """Turn a solution vector into ``(scale, mean, prec)``, or None if degenerate."""
    chi = _as_float(chi)
    eps = _EPS_SINGLE if chi.dtype == np.float32 else _EPS_DOUBLE

    prec = np.array([[chi[0], chi[1]], [chi[1], chi[2]]], dtype=chi.dtype) * -2
    det = prec[0, 0] * prec[1, 1] - prec[0, 1] * prec[1, 0]
    if abs(det) <= eps:
        return None

    mean = np.array(
        [
            (prec[1, 1] * chi[3] - prec[1, 0] * chi[4]) / det,
            (prec[0, 0] * chi[4] - prec[0, 1] * chi[3]) / det,
        ],
        dtype=chi.dtype,
    )

    vtmv = float(mean @ prec @ mean)
    scale = math.exp(float(chi[5]) + vtmv / 2.0)
    return scale, mean, prec


def update_weight_maps(params: Sequence[Parameters], total: np.ndarray) -> None:
    """Recompute each gaussian's weights and normalize them against the sum in ``total``."""
    total[...] = 0

    valid = [p for p in params if p.valid]

    for p in valid:
        xs, ys = _scaled_grid(p.bounds, total.shape)
        p.weights = p.scale * _gaussian_grid(xs, ys, p.mean, p.prec)

    for p in valid:
        total[p.bounds.slices] += p.weights

    for p in valid:
        window = total[p.bounds.slices]
        positive = window > 0
        p.weights = np.where(positive, p.weights / np.where(positive, window, 1), p.weights)


def ge_solve(a, b) -> Optional[np.ndarray]:
    """Solve the transposed system ``a.T @ x == b`` by gaussian elimination.

    Uses partial pivoting and returns None if no sufficiently large pivot exists.
    """
    t = _as_float(a).T.copy()
    rhs = _as_float(b).reshape(-1).copy()
    n = rhs.shape[0]
    if t.shape != (n, n):
        raise ValueError("system matrix and right hand side do not match")
    eps = _EPS_SINGLE if t.dtype == np.float32 else _EPS_DOUBLE

    for c in range(n - 1):
        column = np.abs(t[c:, c])
        pivot = int(np.argmax(column)) + c
        if column[pivot - c] <= eps:
            return None

        if pivot != c:
            t[[c, pivot], c:] = t[[pivot, c], c:]
            rhs[[c, pivot]] = rhs[[pivot, c]]

        factors = t[c + 1 :, c] / t[c, c]
        rhs[c + 1 :] -= factors * rhs[c]
        t[c + 1 :, c + 1 :] -= np.outer(factors, t[c, c + 1 :])

    if abs(t[n - 1, n - 1]) <= eps:
        return None

    x = np.zeros(n, dtype=t.dtype)
    for i in reversed(range(n)):
        x[i] = (rhs[i] - t[i, i + 1 :] @ x[i + 1 :]) / t[i, i]
    return x


def fit(params: Sequence[Parameters], data, tmp: np.ndarray, iterations: int) -> None:
    """Iteratively fit gaussians onto the heatmap ``data``.

    ``tmp`` is scratch space of the heatmap's shape. Parameters whose fit
    degenerates are marked invalid.
    """
    data = np.asarray(data)
    rows, cols = data.shape[:2]
    scale = np.array([2.0 / cols, 2.0 / rows])
    factor = np.outer(scale, scale)

    for p in params:
        if not p.valid:
            continue
        p.mean = p.mean * scale - 1
        p.prec = p.prec / factor

    for _ in range(iterations):
        update_weight_maps(params, tmp)

        for p in params:
            if not p.valid:
                continue

            system, rhs = assemble_system(p.bounds, data, p.weights)

            chi = ge_solve(system, rhs)
            if chi is None:
                p.valid = False
                continue

            result = extract_params(chi)
            if result is None:
                p.valid = False
                continue

            p.scale, p.mean, p.prec = result

    for p in params:
        if not p.valid:
            continue
        p.mean = (p.mean + 1) / scale
        p.prec = p.prec * factor