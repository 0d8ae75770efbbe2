"""Sensor geometry and coordinate transforms.

The sensor is a box around ``center`` in its local frame. Charge carriers are
projected onto the readout surface, the face at the largest local z.
"""

from dataclasses import dataclass, field
from typing import Sequence, Tuple

import numpy as np

Point3 = Tuple[float, float, float]


@dataclass(frozen=True, eq=False)
class SensorGeometry:
    """Read-only sensor description shared by all events.

    Attributes:
        thickness: Extent along local z (um)
        size_x, size_y: Lateral extent (um)
        center: Sensor center in the local frame (um)
        position: Global position of the local origin (um)
        rotation: 3x3 rotation from local to global axes

    """

    thickness: float
    size_x: float
    size_y: float
    center: Point3 = (0.0, 0.0, 0.0)
    position: Point3 = (0.0, 0.0, 0.0)
    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))

    def __post_init__(self):
        if self.thickness <= 0:
            raise ValueError(f"Sensor thickness must be positive: thickness={self.thickness}")

        rotation = np.asarray(self.rotation, dtype=np.float64)
        if rotation.shape != (3, 3):
            raise ValueError(f"Rotation must be a 3x3 matrix, got shape {rotation.shape}")
        if not np.allclose(rotation @ rotation.T, np.eye(3), atol=1e-9):
            raise ValueError("Rotation matrix must be orthonormal")
        rotation.setflags(write=False)
        object.__setattr__(self, "rotation", rotation)

    @classmethod
    def from_config(cls, sensor) -> "SensorGeometry":
        """Build the geometry from a ``SensorConfig``."""
        return cls(
            thickness=sensor.thickness,
            size_x=sensor.size_x,
            size_y=sensor.size_y,
            center=tuple(sensor.center),
            position=tuple(sensor.position),
            rotation=np.asarray(sensor.rotation, dtype=np.float64),
        )

    @property
    def top_z(self) -> float:
        """Local z of the readout surface."""
        return self.center[2] + self.thickness / 2.0

    @property
    def bottom_z(self) -> float:
        """Local z of the back side."""
        return self.center[2] - self.thickness / 2.0

    def local_to_global(self, point: Sequence[float]) -> Point3:
        result = self.rotation @ np.asarray(point, dtype=np.float64) + np.asarray(self.position)
        return (float(result[0]), float(result[1]), float(result[2]))

    def is_within_sensor(self, point: Sequence[float]) -> bool:
        x, y, z = point
        cx, cy, _ = self.center
        return (
            abs(x - cx) <= self.size_x / 2.0
            and abs(y - cy) <= self.size_y / 2.0
            and self.bottom_z <= z <= self.top_z
        )
