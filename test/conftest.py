import numpy as np
import pytest


@pytest.fixture
def rgb_image():
    """Small deterministic RGB photo stand-in: gradients plus a bright square."""
    H, W = 24, 32
    y = np.linspace(0, 255, H).reshape(H, 1)
    x = np.linspace(0, 255, W).reshape(1, W)
    img = np.zeros((H, W, 3), dtype=np.uint8)
    img[..., 0] = np.broadcast_to(x, (H, W)).astype(np.uint8)
    img[..., 1] = np.broadcast_to(y, (H, W)).astype(np.uint8)
    img[..., 2] = 80
    img[8:16, 10:20] = 255
    return img
