"""Image output: color resolution, PPM and PNG export.

A pixel's accumulated radiance sum is turned into an output sample by
dividing by the number of samples, applying gamma 2 (square root), clamping
to [0, 0.999] and mapping to an integer channel value floor(256 * x), so
that full intensity lands on 255.

Supported formats:
    - Plain-text PPM (P3), the primary output
    - PNG (8-bit via Pillow)

Example:
    >>> from src.spheretrace.output.export import write_color, format_ppm
    >>> write_color((100.0, 100.0, 100.0), samples_per_pixel=100)
    (255, 255, 255)
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Largest value kept by the clamp before quantisation
MAX_INTENSITY = 0.999

# Maximum channel value written in the PPM header
PPM_MAX_VALUE = 255


def write_color(
    pixel_color: tuple[float, float, float], samples_per_pixel: int
) -> tuple[int, int, int]:
    """Resolve one pixel's radiance sum into 8-bit RGB.

    Args:
        pixel_color: Sum of the radiance of all samples for the pixel.
        samples_per_pixel: Number of samples in the sum.

    Returns:
        Tuple of (R, G, B) integers in [0, 255].

    Raises:
        ValueError: If samples_per_pixel is not positive.
    """
    if samples_per_pixel <= 0:
        raise ValueError(f"samples_per_pixel must be positive, got {samples_per_pixel}")

    scale = 1.0 / samples_per_pixel
    channels = []
    for value in pixel_color:
        # Divide by sample count and gamma-correct for gamma=2.0
        corrected = math.sqrt(max(value * scale, 0.0))
        channels.append(int(256 * min(max(corrected, 0.0), MAX_INTENSITY)))
    return (channels[0], channels[1], channels[2])


def resolve_image(
    pixel_sums: npt.NDArray[np.floating], samples_per_pixel: int | npt.NDArray[np.integer]
) -> npt.NDArray[np.uint8]:
    """Resolve an image of radiance sums into 8-bit RGB.

    Vectorized form of write_color.

    Args:
        pixel_sums: Array of shape (H, W, 3) with per-pixel radiance sums.
        samples_per_pixel: Sample count, either a scalar or a (H, W) array.

    Returns:
        Array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If any sample count is not positive.
    """
    counts = np.asarray(samples_per_pixel)
    if np.any(counts <= 0):
        raise ValueError("samples_per_pixel must be positive for every pixel")
    if counts.ndim == 2:
        counts = counts[..., np.newaxis]

    scale = 1.0 / counts
    scaled = np.maximum(pixel_sums.astype(np.float64) * scale, 0.0)
    corrected = np.clip(np.sqrt(scaled), 0.0, MAX_INTENSITY)
    return np.floor(256.0 * corrected).astype(np.uint8)


def format_ppm(image: npt.NDArray[np.uint8]) -> str:
    """Format an 8-bit RGB image as plain-text PPM (P3).

    The header is "P3", then "<width> <height>", then "255", followed by
    one "r g b" line per pixel in row-major order from the top row.

    Args:
        image: Array of shape (H, W, 3) with dtype uint8, row 0 at the top.

    Returns:
        The PPM document, newline-terminated.

    Raises:
        ValueError: If the image is not (H, W, 3).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    height, width, _ = image.shape
    lines = ["P3", f"{width} {height}", str(PPM_MAX_VALUE)]
    lines.extend(f"{r} {g} {b}" for r, g, b in image.reshape(-1, 3).tolist())
    return "\n".join(lines) + "\n"


def write_ppm(image: npt.NDArray[np.uint8], stream: TextIO) -> None:
    """Write an 8-bit RGB image as plain-text PPM to a text stream."""
    stream.write(format_ppm(image))


def save_ppm(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit RGB image as a plain-text PPM file."""
    with open(filepath, "w", encoding="ascii", newline="\n") as f:
        write_ppm(image, f)


def save_png_from_array(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit RGB image as a PNG file.

    Args:
        image: Array of shape (H, W, 3) with dtype uint8, row 0 at the top.
        filepath: Output file path (should end in .png).
    """
    pil_image = PILImage.fromarray(np.ascontiguousarray(image, dtype=np.uint8))
    pil_image.save(filepath)


def save_image(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit RGB image, choosing the format from the extension.

    ".ppm" writes plain-text PPM; any other extension is handed to Pillow.
    """
    if Path(filepath).suffix.lower() == ".ppm":
        save_ppm(image, filepath)
    else:
        save_png_from_array(image, filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
