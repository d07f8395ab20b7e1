from pathlib import Path
from typing import Union
from io import BytesIO
import base64
import numpy as np
import cv2
from PIL import Image as PILImage

from ..models.image import Image
from ..exceptions import InvalidBufferError

BufferLike = Union[bytes, bytearray, memoryview, np.ndarray]


class ImageRepository:
    """
    Handles decoding, encoding and file I/O for Image entities.
    Everything leaving this class is RGBA uint8.
    """

    @staticmethod
    def from_buffer(width: int, height: int, data: BufferLike) -> Image:
        """
        Wrap a raw row-major RGBA byte buffer.

        Raises InvalidBufferError when the byte length is not width*height*4.
        """
        if int(width) <= 0 or int(height) <= 0:
            raise InvalidBufferError(f"Buffer dimensions must be positive, got {width}x{height}")
        raw = np.frombuffer(bytes(data), dtype=np.uint8) if not isinstance(data, np.ndarray) \
            else np.ascontiguousarray(data, dtype=np.uint8).reshape(-1)
        expected = int(width) * int(height) * 4
        if raw.size != expected:
            raise InvalidBufferError(
                f"Buffer of {raw.size} bytes does not match {width}x{height} RGBA ({expected} bytes)"
            )
        return Image(pixels=raw.reshape(int(height), int(width), 4).copy())

    @staticmethod
    def validate(image: Image) -> None:
        """Raise InvalidBufferError unless image.pixels is a non-empty (H, W, 4) uint8 array."""
        pixels = image.pixels
        if not isinstance(pixels, np.ndarray):
            raise InvalidBufferError(f"Pixels must be a numpy array, got {type(pixels).__name__}")
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise InvalidBufferError(f"Pixels must have shape (H, W, 4), got {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise InvalidBufferError(f"Pixels must be uint8, got {pixels.dtype}")
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise InvalidBufferError(f"Pixels must not be empty, got {pixels.shape}")

    @staticmethod
    def to_rgba(arr: np.ndarray) -> np.ndarray:
        """Convert an OpenCV-decoded array (gray, BGR or BGRA) into RGBA uint8."""
        if arr.dtype == np.uint16:
            arr = (arr // 257).astype(np.uint8)
        if arr.ndim == 2:
            return cv2.cvtColor(arr, cv2.COLOR_GRAY2RGBA)
        if arr.shape[2] == 3:
            return cv2.cvtColor(arr, cv2.COLOR_BGR2RGBA)
        return cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)

    def load(self, path: Union[str, Path]) -> Image:
        path = Path(path)
        arr = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if arr is None:
            raise FileNotFoundError(f"Image not found or unreadable: {path}")
        return Image(pixels=self.to_rgba(arr), path=path)

    def decode(self, data: bytes) -> Image:
        """Decode encoded image bytes (PNG, JPEG, ...) into an RGBA Image."""
        if not data:
            raise ValueError("Image bytes are empty")
        arr = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
        if arr is None:
            raise ValueError("Image bytes could not be decoded")
        return Image(pixels=self.to_rgba(arr))

    @staticmethod
    def encode_png(image: Image) -> bytes:
        buffer = BytesIO()
        PILImage.fromarray(np.ascontiguousarray(image.pixels)).save(buffer, format="PNG")
        return buffer.getvalue()

    def to_base64_png(self, image: Image) -> str:
        encoded = base64.b64encode(self.encode_png(image)).decode("utf-8")
        return f"data:image/png;base64,{encoded}"

    @staticmethod
    def save(image: Image) -> None:
        PILImage.fromarray(np.ascontiguousarray(image.pixels)).save(image.path)

    @staticmethod
    def save_original_pixels(image: Image) -> None:
        """Save current pixels as original for before/after comparison"""
        if image.original_pixels is None:
            image.original_pixels = image.pixels.copy()
