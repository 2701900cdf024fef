## three-component vector arithmetic for meshport
## Copyright (c) 2026 meshport contributors

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""Vector primitives shared by the mesh model and the codecs.

A :class:`Vector3` is an immutable ``(x, y, z)`` value with single-precision
components, so a vector survives a write and read through any binary
format unchanged.  Vectors compare by exact component equality, which is
what the LightWave loader relies on when it folds repeated points
together, and they unpack like tuples so ``x, y, z = v`` works anywhere
a coordinate triple is expected.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np

epsilon = 1e-9


def isgoodnum(x) -> bool:
    return (not isinstance(x, bool)) and isinstance(x, (int, float))


def close(a: float, b: float, tol: float = epsilon) -> bool:
    return abs(a - b) < tol


@dataclass(frozen=True)
class Vector3:
    """Immutable 3D vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __post_init__(self):
        ## components are held at single precision, as the binary formats store them
        for name in ('x', 'y', 'z'):
            object.__setattr__(self, name, float(np.float32(getattr(self, name))))

    @classmethod
    def from_seq(cls, seq: Sequence[float]) -> "Vector3":
        if len(seq) < 3:
            raise ValueError('vector needs three components: {}'.format(seq))
        return cls(float(seq[0]), float(seq[1]), float(seq[2]))

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __len__(self) -> int:
        return 3

    def __getitem__(self, i: int) -> float:
        return (self.x, self.y, self.z)[i]

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Vector3":
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Vector3":
        return Vector3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> "Vector3":
        return Vector3(-self.x, -self.y, -self.z)

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalize(self) -> "Vector3":
        """Return the unit vector, or ``self`` when the length is zero."""
        mag = self.length()
        if mag > 0:
            return self / mag
        return self

    def dot(self, other: "Vector3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vector3") -> "Vector3":
        return Vector3(self.y * other.z - self.z * other.y,
                       self.z * other.x - self.x * other.z,
                       self.x * other.y - self.y * other.x)

    def isclose(self, other: "Vector3", tol: float = 1e-5) -> bool:
        return (close(self.x, other.x, tol) and close(self.y, other.y, tol)
                and close(self.z, other.z, tol))

    def as_tuple(self) -> tuple:
        return (self.x, self.y, self.z)


ORIGIN = Vector3(0.0, 0.0, 0.0)


__all__ = ['Vector3', 'ORIGIN', 'epsilon', 'isgoodnum', 'close']
