from pathlib import Path
import os
import cv2
from dotenv import load_dotenv

from ..models.image import Image
from ..repositories.image_repository import ImageRepository, BufferLike

# Load environment variables
load_dotenv()


class ImageService:
    """I/O helpers and working-size preparation. No leaf logic here."""

    def __init__(self):
        self.MAX_IMAGE_DIM = int(os.getenv("MAX_IMAGE_DIM", "900"))
        self.image_repository = ImageRepository()

    def from_buffer(self, width: int, height: int, data: BufferLike) -> Image:
        """Wrap raw RGBA bytes; raises InvalidBufferError on a size mismatch."""
        return self.image_repository.from_buffer(width, height, data)

    def validate(self, img: Image) -> None:
        self.image_repository.validate(img)

    def load(self, path: str | Path) -> Image:
        """Load a single image from disk into an RGBA Image object."""
        return self.image_repository.load(path)

    def decode(self, data: bytes) -> Image:
        return self.image_repository.decode(data)

    def encode_png(self, img: Image) -> bytes:
        return self.image_repository.encode_png(img)

    def to_base64_png(self, img: Image) -> str:
        return self.image_repository.to_base64_png(img)

    def save(self, image: Image) -> None:
        """
        Business-level method to save the image to its path.
        """
        self.image_repository.save(image)

    def preserve_original_state(self, image: Image) -> None:
        """
        Preserve the current image state before processing pipeline.
        """
        self.image_repository.save_original_pixels(image)

    def fit_to_max_dim(self, img: Image, max_dim: int | None = None) -> Image:
        """
        Downscale so the longest side is at most `max_dim`, keeping the
        aspect ratio. Smaller images are returned unchanged.

        Args:
            img (Image): RGBA image
            max_dim (int): defaults to MAX_IMAGE_DIM
        Returns:
            Image: the same object, or a new resized Image
        """
        max_dim = max_dim or self.MAX_IMAGE_DIM
        h, w = img.pixels.shape[:2]
        if max(w, h) <= max_dim:
            return img

        ratio = w / h
        if ratio >= 1:
            new_w, new_h = max_dim, max(1, round(max_dim / ratio))
        else:
            new_w, new_h = max(1, round(max_dim * ratio)), max_dim

        resized = cv2.resize(img.pixels, (new_w, new_h), interpolation=cv2.INTER_AREA)
        return Image(pixels=resized, path=img.path)
