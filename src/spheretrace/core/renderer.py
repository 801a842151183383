"""Scanline renderer wrapping the integrator.

This module provides a convenient wrapper around the core integrator that
supports:
- Rendering the image one scanline at a time, top row first
- Progress callbacks or a generator for progress reporting
- Resolving the accumulated radiance into gamma-corrected 8-bit output
- Saving the result as PPM or PNG

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.core.renderer import Renderer
    >>> from src.spheretrace.scene.default_scene import create_default_scene
    >>> from src.spheretrace.camera.pinhole import setup_camera
    >>>
    >>> world, camera = create_default_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer(400, 225, samples_per_pixel=100, max_depth=50)
    >>> renderer.render()
    >>> image = renderer.get_image_rgb8()
"""

from collections.abc import Callable, Generator
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt

from src.spheretrace.core.config import RenderSettings
from src.spheretrace.core.integrator import (
    MAX_DEPTH,
    SAMPLES_PER_PIXEL,
    clear_render_target,
    get_accumulated_image_numpy,
    get_sample_count_numpy,
    get_total_samples,
    render_image,
    render_scanline,
    setup_render_target,
)
from src.spheretrace.output.export import format_ppm, resolve_image, save_image, write_ppm

# Type alias for progress callback
# Callback receives (scanlines_remaining, image_height) before each row
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """A renderer that fills the image scanline by scanline.

    The renderer keeps its own width/height and sampling settings and
    delegates to the global integrator buffers (which are Taichi fields).

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Jittered samples per pixel per render pass.
        max_depth: Maximum path length.
    """

    def __init__(
        self,
        width: int,
        height: int,
        samples_per_pixel: int = SAMPLES_PER_PIXEL,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        """Initialize the renderer and its render target.

        Raises:
            ValueError: If dimensions or sampling settings are invalid.
        """
        if samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {samples_per_pixel}")
        if max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {max_depth}")

        self._width = width
        self._height = height
        self._samples_per_pixel = samples_per_pixel
        self._max_depth = max_depth
        setup_render_target(width, height)

    @classmethod
    def from_settings(cls, settings: RenderSettings) -> "Renderer":
        """Create a renderer from validated RenderSettings."""
        settings.validate()
        return cls(
            settings.image_width,
            settings.image_height,
            samples_per_pixel=settings.samples_per_pixel,
            max_depth=settings.max_depth,
        )

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def samples_per_pixel(self) -> int:
        """Get the number of samples per pixel per pass."""
        return self._samples_per_pixel

    @property
    def max_depth(self) -> int:
        """Get the maximum path length."""
        return self._max_depth

    @property
    def sample_count(self) -> int:
        """Get the samples accumulated in the most-sampled pixel so far."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear the accumulated image without changing its dimensions."""
        clear_render_target()

    def render(self, callback: ProgressCallback | None = None) -> None:
        """Render one pass over the image, top scanline first.

        Args:
            callback: Optional callback called before each scanline with
                (scanlines_remaining, height).
        """
        for remaining in self.render_progressive():
            if callback is not None:
                callback(remaining, self._height)

    def render_progressive(self) -> Generator[int, None, None]:
        """Render one pass, yielding before each scanline.

        Yields:
            The number of scanlines remaining below the one about to be
            rendered (height - 1 for the top row, 0 for the bottom row).

        Example:
            >>> for remaining in renderer.render_progressive():
            ...     print(f"Scanlines remaining: {remaining}", file=sys.stderr)
        """
        for j in range(self._height - 1, -1, -1):
            yield j
            render_scanline(j, self._samples_per_pixel, self._max_depth)

    def render_frame(self) -> None:
        """Render one pass over the whole image in a single kernel launch."""
        render_image(self._samples_per_pixel, self._max_depth)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the averaged linear radiance as a (height, width, 3) array.

        Pixels without samples are black.
        """
        counts = get_sample_count_numpy()
        sums = get_accumulated_image_numpy()
        return (sums / np.maximum(counts, 1)[..., np.newaxis]).astype(np.float32)

    def get_image_rgb8(self) -> npt.NDArray[np.uint8]:
        """Get the gamma-corrected 8-bit image as a (height, width, 3) array.

        Raises:
            ValueError: If some pixel has not been rendered yet.
        """
        return resolve_image(get_accumulated_image_numpy(), get_sample_count_numpy())

    def to_ppm(self) -> str:
        """Format the rendered image as plain-text PPM."""
        return format_ppm(self.get_image_rgb8())

    def write_ppm(self, stream: TextIO) -> None:
        """Write the rendered image as plain-text PPM to a text stream."""
        write_ppm(self.get_image_rgb8(), stream)

    def save_image(self, filepath: str | Path) -> None:
        """Save the rendered image; the extension selects PPM or PNG."""
        save_image(self.get_image_rgb8(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self.samples_per_pixel}, max_depth={self.max_depth})"
        )
