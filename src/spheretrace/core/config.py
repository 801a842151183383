"""Render settings.

RenderSettings collects the knobs of a render: output size, sampling
budget, recursion depth, random seed and Taichi backend. The command-line
entry point fills it from arguments; library users construct it directly.
"""

import math
from dataclasses import dataclass
from typing import Literal

Arch = Literal["cpu", "gpu"]


@dataclass
class RenderSettings:
    """Configuration for one render.

    Attributes:
        image_width: Output width in pixels.
        aspect_ratio: Width divided by height; the height is derived.
        samples_per_pixel: Jittered samples averaged per pixel.
        max_depth: Maximum number of bounces per path.
        seed: Random seed passed to Taichi. None keeps Taichi's default.
        arch: Taichi backend to request ("cpu" or "gpu").
    """

    image_width: int = 400
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 100
    max_depth: int = 50
    seed: int | None = None
    arch: Arch = "cpu"

    @property
    def image_height(self) -> int:
        """Output height in pixels, int(image_width / aspect_ratio)."""
        return int(self.image_width / self.aspect_ratio)

    def validate(self) -> None:
        """Check the settings.

        Raises:
            ValueError: If any setting is out of range.
        """
        if not math.isfinite(self.aspect_ratio) or self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.image_width <= 0:
            raise ValueError(f"image_width must be positive, got {self.image_width}")
        if self.image_height <= 0:
            raise ValueError(
                f"image_width {self.image_width} and aspect_ratio {self.aspect_ratio} "
                "give an empty image"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {self.max_depth}")
        if self.arch not in ("cpu", "gpu"):
            raise ValueError(f"arch must be 'cpu' or 'gpu', got {self.arch!r}")
