import numpy as np

from ..models.image import Image
from ..models.color import LabColor, BorderProfile
from .color_space_service import ColorSpaceService


class BorderStatisticsService:
    """
    Estimates what "background" looks like from the image border.

    The background is assumed to dominate the frame edges, so the Lab mean of
    the border and the spread of border samples around it tell segmentation
    how far a pixel must be from the border color to count as leaf.
    """

    def __init__(self):
        self.color_space_service = ColorSpaceService()

    @staticmethod
    def sample_border(pixels: np.ndarray, step: int) -> np.ndarray:
        """
        Collect RGB samples from the top/bottom rows and left/right columns.

        The stride is clamped to the image size so every side yields at least
        one sample. Returns an (N, 3) uint8 array.
        """
        h, w = pixels.shape[:2]
        step = max(1, min(int(step), w, h))

        xs = np.arange(0, w, step)
        ys = np.arange(0, h, step)
        samples = [
            pixels[0, xs, :3],
            pixels[h - 1, xs, :3],
            pixels[ys, 0, :3],
            pixels[ys, w - 1, :3],
        ]
        return np.concatenate(samples, axis=0)

    def profile(self, img: Image, step: int = 6) -> BorderProfile:
        samples = self.sample_border(img.pixels, step)
        lab = self.color_space_service.image_to_lab(samples)

        mean = lab.mean(axis=0)
        mean_lab = LabColor(L=float(mean[0]), a=float(mean[1]), b=float(mean[2]))
        distances = self.color_space_service.image_delta_e(lab, mean_lab)

        return BorderProfile(
            mean_lab=mean_lab,
            mean_distance=float(distances.mean()),
            std_distance=float(distances.std()),
            sample_count=int(len(samples)),
        )
