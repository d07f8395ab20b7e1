from typing import List, Tuple
import cv2
import numpy as np

# alpha below this is treated as fully transparent, both on input and after feathering
ALPHA_FLOOR = 16

_KERNEL_3x3 = np.ones((3, 3), np.uint8)


class SegmentationRepository:
    """
    Mask-level building blocks of local segmentation.

    • Hard "cannot be a leaf" color filter + adaptive deltaE threshold.
    • Morphological opening (8-connected, 3x3).
    • 4-connected component labeling with an explicit stack.
    • 3x3 feathering of the final mask into an alpha ramp.

    Masks are (H, W) uint8 arrays holding 0 or 1.
    """

    # ---------- thresholding ----------
    @staticmethod
    def impossible_leaf_colors(hsv: np.ndarray) -> np.ndarray:
        """
        Boolean (H, W) map of colors no leaf has: near-white, near-black,
        neutral gray midtones and strong blue/cyan.
        """
        hue, sat, val = hsv[..., 0], hsv[..., 1], hsv[..., 2]
        near_white = (val > 0.95) & (sat < 0.12)
        near_black = (val < 0.06) & (sat < 0.12)
        neutral_gray = (sat < 0.06) & (val >= 0.06) & (val <= 0.94)
        blue_cyan = (hue >= 180) & (hue <= 260) & (sat > 0.12)
        return near_white | near_black | neutral_gray | blue_cyan

    def plausible_leaf_mask(self, alpha: np.ndarray, hsv: np.ndarray) -> np.ndarray:
        """Opaque pixels that are not an impossible leaf color."""
        excluded = (alpha < ALPHA_FLOOR) | self.impossible_leaf_colors(hsv)
        return (~excluded).astype(np.uint8)

    def threshold_mask(
        self,
        alpha: np.ndarray,
        hsv: np.ndarray,
        distance: np.ndarray,
        threshold: float,
    ) -> np.ndarray:
        """
        1 where a pixel is a plausible leaf color AND its deltaE from the
        border mean exceeds the threshold, 0 elsewhere.
        """
        plausible = self.plausible_leaf_mask(alpha, hsv).astype(bool)
        return (plausible & (distance > threshold)).astype(np.uint8)

    # ---------- morphology ----------
    @staticmethod
    def erode(mask: np.ndarray, iterations: int = 1) -> np.ndarray:
        """8-connected erosion. Out-of-bounds neighbors count as background."""
        out = mask.copy()
        for _ in range(max(0, iterations)):
            out = cv2.erode(out, _KERNEL_3x3, borderType=cv2.BORDER_CONSTANT, borderValue=0)
        return out

    @staticmethod
    def dilate(mask: np.ndarray, iterations: int = 1) -> np.ndarray:
        """8-connected dilation over in-bounds neighbors only."""
        out = mask.copy()
        for _ in range(max(0, iterations)):
            out = cv2.dilate(out, _KERNEL_3x3, borderType=cv2.BORDER_CONSTANT, borderValue=0)
        return out

    def open(self, mask: np.ndarray, iterations: int) -> np.ndarray:
        """
        1) Erode `iterations` times -> drops speckle
        2) Dilate `iterations` times -> restores the bulk shape
        """
        return self.dilate(self.erode(mask, iterations), iterations)

    # ---------- connected components ----------
    @staticmethod
    def label_components(mask: np.ndarray) -> Tuple[np.ndarray, List[int], int]:
        """
        4-connected labeling by iterative flood fill.

        Returns
        -------
        labels  : (H, W) int32, 0 = background, 1..N = component id
        sizes   : sizes[i] is the pixel count of component i + 1
        largest : id of the largest component (first one on ties), 0 if none
        """
        h, w = mask.shape
        n = h * w
        flat = mask.ravel().tolist()
        labels = [0] * n
        sizes: List[int] = []
        largest, largest_size = 0, 0

        for seed in np.flatnonzero(mask).tolist():
            if labels[seed]:
                continue
            current = len(sizes) + 1
            labels[seed] = current
            stack = [seed]
            size = 0

            while stack:
                idx = stack.pop()
                size += 1
                x = idx % w
                # left, right, up, down
                if x > 0:
                    nb = idx - 1
                    if flat[nb] and not labels[nb]:
                        labels[nb] = current
                        stack.append(nb)
                if x < w - 1:
                    nb = idx + 1
                    if flat[nb] and not labels[nb]:
                        labels[nb] = current
                        stack.append(nb)
                if idx >= w:
                    nb = idx - w
                    if flat[nb] and not labels[nb]:
                        labels[nb] = current
                        stack.append(nb)
                if idx < n - w:
                    nb = idx + w
                    if flat[nb] and not labels[nb]:
                        labels[nb] = current
                        stack.append(nb)

            sizes.append(size)
            if size > largest_size:
                largest, largest_size = current, size

        return np.array(labels, dtype=np.int32).reshape(h, w), sizes, largest

    # ---------- feathering ----------
    @staticmethod
    def feather(mask: np.ndarray, floor: int = ALPHA_FLOOR) -> np.ndarray:
        """
        Average the mask over each pixel's in-bounds 3x3 neighborhood and
        scale to 0..255. Values below `floor` become 0 (no faint halo).
        """
        mask_f = mask.astype(np.float32)
        sums = cv2.boxFilter(mask_f, -1, (3, 3), normalize=False,
                             borderType=cv2.BORDER_CONSTANT)
        counts = cv2.boxFilter(np.ones_like(mask_f), -1, (3, 3), normalize=False,
                               borderType=cv2.BORDER_CONSTANT)
        alpha = np.rint(sums / counts * 255.0).astype(np.uint8)
        alpha[alpha < floor] = 0
        return alpha
