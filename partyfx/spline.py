"""Periodic splines for the ambient confetti wobble.

``create_poisson`` draws a maximal 1D Poisson-disc set over [0, 1]: darts are
thrown into the part of the interval that is still far enough from every
earlier dart until nothing is left. The resulting control points are spread
out without looking regular, so the interpolated path has no visible jitter.
"""

import bisect
import math
import random

from partyfx.config import ECCENTRICITY


def create_poisson(eccentricity=ECCENTRICITY):
    """Return sorted sample positions in [0, 1], including both endpoints.

    Adjacent samples are at least ``2 / eccentricity`` apart.
    """
    radius = 1 / eccentricity
    gap = radius + radius
    # Flat list of available intervals: [a0, b0, a1, b1, ...]
    domain = [gap, 1 - gap]
    measure = domain[1] - domain[0]
    spline = [0.0, 1.0]

    while measure > 0:
        dart = measure * random.random()

        # Map the dart onto the available intervals
        offset = 0
        for i in range(0, len(domain), 2):
            a, b = domain[i], domain[i + 1]
            if dart < offset + (b - a):
                dart += a - offset
                break
            offset += b - a
        else:
            # Rounding left the dart past the last interval
            dart = (domain[-2] + domain[-1]) / 2
        spline.append(dart)
        c, d = dart - gap, dart + gap

        # Trim the domain, walking backwards so splices don't shift what's left
        for i in range(len(domain) - 1, 0, -2):
            left = i - 1
            a, b = domain[left], domain[i]
            #  c---d          c---d  untouched
            #    c-----d  c-----d    trim
            #    c--------------d    delete
            #          c--d          split
            #        a------b
            if c <= a < d:
                if b > d:
                    domain[left] = d
                else:
                    del domain[left:i + 1]
            elif a < c < b:
                if b <= d:
                    domain[i] = c
                else:
                    domain[i:i] = [c, d]

        measure = sum(domain[i + 1] - domain[i] for i in range(0, len(domain), 2))

    return sorted(spline)


def interpolate(a, b, t):
    """Cosine interpolation between ``a`` and ``b`` for t in [0, 1]."""
    return (1 - math.cos(math.pi * t)) / 2 * (b - a) + a


def sample(spline_x, spline_y, phi):
    """Interpolated radius at phase ``phi`` of a closed spline."""
    j = bisect.bisect_right(spline_x, phi)
    j = min(max(j, 1), len(spline_x) - 1)
    i = j - 1
    t = (phi - spline_x[i]) / (spline_x[j] - spline_x[i])
    return interpolate(spline_y[i], spline_y[j], t)
