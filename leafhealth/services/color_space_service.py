from typing import Tuple
import math
import numpy as np

from ..models.color import LabColor

# D65 reference white
_WHITE_X = 0.95047
_WHITE_Y = 1.0
_WHITE_Z = 1.08883

# linear sRGB -> XYZ (D65)
_RGB_TO_XYZ = np.array([
    [0.4124, 0.3576, 0.1805],
    [0.2126, 0.7152, 0.0722],
    [0.0193, 0.1192, 0.9505],
])

_LAB_KNEE = 0.008856
_SRGB_KNEE = 0.04045


def _srgb_to_linear(c: float) -> float:
    return c / 12.92 if c <= _SRGB_KNEE else ((c + 0.055) / 1.055) ** 2.4


def _lab_f(t: float) -> float:
    return t ** (1.0 / 3.0) if t > _LAB_KNEE else 7.787 * t + 16.0 / 116.0


class ColorSpaceService:
    """
    Pure color conversions. No state, no I/O.

    Scalar helpers work on one 0-255 RGB triple; the image_* variants do the
    same math over a whole (H, W, 3) array and agree with the scalar ones.
    """

    # ── single pixel ─────────────────────────────────────────────────
    @staticmethod
    def rgb_to_hsv(r: int, g: int, b: int) -> Tuple[float, float, float]:
        """
        Returns (hue in [0, 360), saturation in [0, 1], value in [0, 1]).
        Hue is 0 for achromatic colors.
        """
        r, g, b = r / 255.0, g / 255.0, b / 255.0
        mx, mn = max(r, g, b), min(r, g, b)
        delta = mx - mn

        if delta == 0:
            hue = 0.0
        elif mx == r:
            hue = 60.0 * (((g - b) / delta) % 6)
        elif mx == g:
            hue = 60.0 * ((b - r) / delta + 2)
        else:
            hue = 60.0 * ((r - g) / delta + 4)
        if hue >= 360.0:
            hue -= 360.0

        sat = 0.0 if mx == 0 else delta / mx
        return hue, sat, mx

    @staticmethod
    def rgb_to_lab(r: int, g: int, b: int) -> LabColor:
        rl = _srgb_to_linear(r / 255.0)
        gl = _srgb_to_linear(g / 255.0)
        bl = _srgb_to_linear(b / 255.0)

        x, y, z = (_RGB_TO_XYZ @ np.array([rl, gl, bl])).tolist()
        fx = _lab_f(x / _WHITE_X)
        fy = _lab_f(y / _WHITE_Y)
        fz = _lab_f(z / _WHITE_Z)

        return LabColor(L=116.0 * fy - 16.0, a=500.0 * (fx - fy), b=200.0 * (fy - fz))

    @staticmethod
    def delta_e(lab1: LabColor, lab2: LabColor) -> float:
        """Simplified deltaE: Euclidean distance in Lab (not CIEDE2000)."""
        return math.sqrt(
            (lab1.L - lab2.L) ** 2 + (lab1.a - lab2.a) ** 2 + (lab1.b - lab2.b) ** 2
        )

    # ── whole image ──────────────────────────────────────────────────
    @staticmethod
    def image_to_hsv(rgb: np.ndarray) -> np.ndarray:
        """
        Args:
            rgb: (..., 3) uint8 RGB
        Returns:
            (..., 3) float64 with hue in degrees, sat and val in [0, 1]
        """
        arr = rgb[..., :3].astype(np.float64) / 255.0
        r, g, b = arr[..., 0], arr[..., 1], arr[..., 2]
        mx = arr.max(axis=-1)
        mn = arr.min(axis=-1)
        delta = mx - mn
        safe = np.where(delta == 0, 1.0, delta)

        hue = np.select(
            [delta == 0, mx == r, mx == g],
            [0.0, 60.0 * np.mod((g - b) / safe, 6), 60.0 * ((b - r) / safe + 2)],
            default=60.0 * ((r - g) / safe + 4),
        )
        hue = np.where(hue >= 360.0, hue - 360.0, hue)
        sat = np.where(mx == 0, 0.0, delta / np.where(mx == 0, 1.0, mx))
        return np.stack([hue, sat, mx], axis=-1)

    @staticmethod
    def image_to_lab(rgb: np.ndarray) -> np.ndarray:
        """
        Args:
            rgb: (..., 3) uint8 RGB
        Returns:
            (..., 3) float64 L, a, b
        """
        c = rgb[..., :3].astype(np.float64) / 255.0
        linear = np.where(c <= _SRGB_KNEE, c / 12.92, ((c + 0.055) / 1.055) ** 2.4)
        xyz = linear @ _RGB_TO_XYZ.T
        t = xyz / np.array([_WHITE_X, _WHITE_Y, _WHITE_Z])
        f = np.where(t > _LAB_KNEE, np.cbrt(t), 7.787 * t + 16.0 / 116.0)
        fx, fy, fz = f[..., 0], f[..., 1], f[..., 2]
        return np.stack([116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz)], axis=-1)

    @staticmethod
    def image_delta_e(lab: np.ndarray, reference: LabColor) -> np.ndarray:
        """Per-pixel deltaE between an (..., 3) Lab array and one reference color."""
        diff = lab - np.array(reference.as_tuple())
        return np.sqrt((diff ** 2).sum(axis=-1))
