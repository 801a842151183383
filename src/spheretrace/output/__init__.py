"""Output module: resolving radiance sums into 8-bit color and saving images."""

from src.spheretrace.output.export import (
    compute_rmse,
    format_ppm,
    resolve_image,
    save_image,
    save_png_from_array,
    save_ppm,
    write_color,
    write_ppm,
)

__all__ = [
    "write_color",
    "resolve_image",
    "format_ppm",
    "write_ppm",
    "save_ppm",
    "save_png_from_array",
    "save_image",
    "compute_rmse",
]
