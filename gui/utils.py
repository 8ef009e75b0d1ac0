import numpy as np
from PIL import Image, ImageTk

def fit_size(width, height, box_width, box_height):
    """Largest (w, h) with the image's aspect ratio that fits inside the box (never below 1x1)."""
    if width <= 0 or height <= 0 or box_width <= 0 or box_height <= 0:
        return (1, 1)
    scale = min(box_width / width, box_height / height)
    return (max(1, int(width * scale)), max(1, int(height * scale)))

def np_to_tkimage(arr, box=None):
    """Convert a numpy array (H×W or H×W×3) to a PhotoImage for tkinter, scaled to fit `box` if given."""
    if arr.ndim == 2:
        img = Image.fromarray(np.uint8(arr))
    else:
        img = Image.fromarray(np.uint8(arr[..., :3]))
    if box is not None:
        img = img.resize(fit_size(img.width, img.height, *box), Image.BILINEAR)
    return ImageTk.PhotoImage(img)
