"""
Shared fixtures: synthetic RGBA buffers and palettes.
"""
import numpy as np
import pytest
from PIL import Image


def block_image(blocks, width=30, alpha=255):
    """
    Stack solid horizontal bands into an RGBA array.

    blocks: list of ((r, g, b), rows) or ((r, g, b, a), rows)
    """
    rows = []
    for color, height in blocks:
        rgba = tuple(color) if len(color) == 4 else tuple(color) + (alpha,)
        rows.append(np.tile(np.array(rgba, dtype=np.uint8), (height, width, 1)))
    return np.concatenate(rows, axis=0)


@pytest.fixture
def rgb_blocks():
    """30x30 image: 50% red, 30% green, 20% blue."""
    return block_image([
        ((255, 0, 0), 15),
        ((0, 255, 0), 9),
        ((0, 0, 255), 6),
    ])


@pytest.fixture
def image_file(tmp_path, rgb_blocks):
    """The RGB block image saved as PNG."""
    path = tmp_path / "blocks.png"
    Image.fromarray(rgb_blocks).save(path)
    return path


@pytest.fixture
def complementary_palette():
    return ['#ff0000', '#00ffff']


@pytest.fixture
def rich_palette():
    """Six colors covering several hue relationships."""
    return ['#ff0000', '#00ff00', '#0000ff', '#ffff00', '#808080', '#bf4040']
