"""Matplotlib-based display of finished renders.

Example:
    >>> from raytracer.preview.display import show_image
    >>> pixels = camera.render(scene, seed=1)
    >>> show_image(pixels, title="Random scene")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt


def show_image(
    pixels: npt.NDArray[np.uint8],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 4.5),
    block: bool = True,
) -> None:
    """Display an 8-bit render in a Matplotlib figure.

    Args:
        pixels: Image array of shape (H, W, 3), top row first.
        title: Figure title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    ax.imshow(pixels)
    ax.axis("off")

    if title is None:
        height, width = pixels.shape[:2]
        title = f"Render {width}x{height}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
