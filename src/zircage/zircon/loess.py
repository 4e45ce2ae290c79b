"""
Local polynomial regression (loess) in one dimension

Description:
    A weighted least-squares polynomial is fitted around every distinct
    abscissa (vertex) of the input data using tricube weights over the
    nearest floor(n * span) points (Cleveland et al., 1992). The fitted value
    and slope at each vertex are kept, and the smooth curve between vertices
    is evaluated with cubic Hermite interpolation, so predictions are cheap
    once the fit exists.

References:

    Cleveland, W. S., Grosse, E. and Shyu, W. M., 1992. Local regression models,
          in Statistical Models in S, edited by J. M. Chambers and T. J. Hastie,
          pp. 309-376, Wadsworth & Brooks/Cole, Pacific Grove, California.
"""

import numpy as np
from scipy.interpolate import CubicHermiteSpline


def tricube(u):
    """Tricube weight function, zero for |u| >= 1."""
    u = np.clip(np.abs(u), 0.0, 1.0)
    return (1.0 - u**3) ** 3


class LoessFit:
    """Loess smoother fitted to (xs, ys) data.

    Parameters
    ----------
    xs : array_like
        Abscissa values of the data.
    ys : array_like
        Ordinate values of the data.
    span : float, default=0.75
        Fraction of the data used in each local fit.
    degree : int, default=2
        Degree of the local polynomials.
    """

    def __init__(self, xs, ys, span=0.75, degree=2):
        xs = np.asarray(xs, dtype=float)
        ys = np.asarray(ys, dtype=float)
        if xs.ndim != 1 or xs.shape != ys.shape:
            raise ValueError("xs and ys must be one-dimensional and of equal length.")
        if span <= 0.0:
            raise ValueError(f"Loess span must be positive, got {span}.")
        if degree < 1:
            raise ValueError(f"Loess degree must be at least 1, got {degree}.")

        n = len(xs)
        q = int(np.floor(n * span))
        if q < degree + 1:
            raise ValueError(
                f"Not enough points for a degree {degree} loess fit ({q} points in span)."
            )
        q = min(q, n)

        self.span = span
        self.degree = degree
        self.vertices = np.unique(xs)
        self.values = np.zeros(len(self.vertices))
        self.slopes = np.zeros(len(self.vertices))

        for i, vertex in enumerate(self.vertices):
            dist = np.abs(xs - vertex)
            dmax = np.partition(dist, q - 1)[q - 1]
            if span > 1.0:
                dmax *= span
            weights = tricube(dist / dmax) if dmax > 0.0 else (dist == 0.0) * 1.0

            # Local polynomial centred on the vertex: b0 is the value, b1 the slope
            vander = np.vander(xs - vertex, self.degree + 1, increasing=True)
            sqrt_w = np.sqrt(weights)
            coeffs = np.linalg.lstsq(vander * sqrt_w[:, None], ys * sqrt_w, rcond=None)[0]
            self.values[i] = coeffs[0]
            self.slopes[i] = coeffs[1]

        if len(self.vertices) > 1:
            self._spline = CubicHermiteSpline(
                self.vertices, self.values, self.slopes, extrapolate=False
            )
        else:
            self._spline = None

    @property
    def xmin(self):
        return self.vertices[0]

    @property
    def xmax(self):
        return self.vertices[-1]

    def predict(self, x):
        """Evaluates the smoothed curve at x (scalar or array)."""
        x_arr = np.asarray(x, dtype=float)
        if np.any(x_arr < self.xmin) or np.any(x_arr > self.xmax):
            raise ValueError(
                f"Loess prediction outside of fitted range [{self.xmin}, {self.xmax}]."
            )
        if self._spline is None:
            result = np.full(x_arr.shape, self.values[0])
        else:
            result = self._spline(x_arr)
        if np.ndim(x) == 0:
            return float(result)
        return result
