#!/usr/bin/env python3
"""
Vector helpers for 3D operations.

Vector3 is an immutable tuple, so a vector handed to one body can never be
changed through another. Every operation returns a new vector.
"""
import math
from typing import NamedTuple


class DegenerateVectorError(ArithmeticError):
    """Raised when a zero-length vector is normalized."""


def clamp(x: float, a: float, b: float) -> float:
    """Clamp x to the inclusive range [a, b]."""
    return max(a, min(b, x))


class Vector3(NamedTuple):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def add(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def sub(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def scale(self, s: float) -> "Vector3":
        return Vector3(self.x * s, self.y * s, self.z * s)

    def dot(self, other: "Vector3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def distance(self, other: "Vector3") -> float:
        return self.sub(other).magnitude()

    def normalize(self) -> "Vector3":
        l = self.magnitude()
        if l == 0:
            raise DegenerateVectorError("cannot normalize a zero-length vector")
        return self.scale(1.0 / l)

    def limit(self, max_mag: float) -> "Vector3":
        """Clamp the magnitude to max_mag, keeping the direction."""
        l = self.magnitude()
        if l <= max_mag or l == 0:
            return self
        return self.scale(max_mag / l)

    def angle_to(self, other: "Vector3") -> float:
        """Angle in radians between two vectors; 0 if either has zero length."""
        denom = self.magnitude() * other.magnitude()
        if denom == 0:
            return 0.0
        return math.acos(clamp(self.dot(other) / denom, -1.0, 1.0))

    @classmethod
    def from_sequence(cls, seq) -> "Vector3":
        return cls(float(seq[0]), float(seq[1]), float(seq[2]))


ZERO = Vector3(0.0, 0.0, 0.0)
