"""Grayscale conversion and binarization for rendered document pages.

Provides fixed-threshold, Otsu, and adaptive thresholding to turn
rendered PDF pages into black and white images before OCR.
"""

import cv2
import numpy as np

from zipmeta.utils.logger import get_logger

logger = get_logger(__name__)


def to_gray(image: np.ndarray) -> np.ndarray:
    """Convert an image to grayscale if it has color channels.

    Args:
        image: Input image (RGB, RGBA, or grayscale).

    Returns:
        Grayscale image.
    """
    if len(image.shape) == 3:
        if image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_RGBA2GRAY)
        return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
    return image


def binarize_threshold(image: np.ndarray, percent: float = 65.0) -> np.ndarray:
    """Binarize an image with a fixed intensity threshold.

    Args:
        image: Input image (RGB or grayscale).
        percent: Threshold as a percentage of full intensity. Pixels
            brighter than this become white, the rest black.

    Returns:
        Binary image with pixel values 0 or 255.
    """
    gray = to_gray(image)
    level = 255.0 * percent / 100.0
    _, binary = cv2.threshold(gray, level, 255, cv2.THRESH_BINARY)
    logger.debug("Applied fixed binarization at %.0f%%", percent)
    return binary


def binarize_otsu(image: np.ndarray) -> np.ndarray:
    """Binarize an image using Otsu's automatic thresholding.

    Args:
        image: Input image (RGB or grayscale).

    Returns:
        Binary image with pixel values 0 or 255.
    """
    gray = to_gray(image)
    _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    logger.debug("Applied Otsu binarization")
    return binary


def binarize_adaptive(
    image: np.ndarray, block_size: int = 11, c: int = 2
) -> np.ndarray:
    """Binarize an image using adaptive Gaussian thresholding.

    Args:
        image: Input image (RGB or grayscale).
        block_size: Size of the pixel neighborhood for threshold calculation.
        c: Constant subtracted from the mean.

    Returns:
        Binary image with pixel values 0 or 255.
    """
    gray = to_gray(image)
    result = cv2.adaptiveThreshold(
        gray,
        255,
        cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
        cv2.THRESH_BINARY,
        block_size,
        c,
    )
    logger.debug("Applied adaptive binarization (block=%d, c=%d)", block_size, c)
    return result


def to_monochrome(
    image: np.ndarray, method: str = "threshold", percent: float = 65.0
) -> np.ndarray:
    """Convert a page image to black and white with the chosen method.

    Args:
        image: Input image (RGB or grayscale).
        method: One of ``"threshold"``, ``"otsu"`` or ``"adaptive"``.
        percent: Threshold percentage for the ``"threshold"`` method.

    Returns:
        Binary grayscale image.
    """
    if method == "otsu":
        return binarize_otsu(image)
    if method == "adaptive":
        return binarize_adaptive(image)
    return binarize_threshold(image, percent)
