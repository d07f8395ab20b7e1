from __future__ import annotations
import base64
import binascii
import logging
import os
import requests
from dotenv import load_dotenv

from ..models.image import Image
from ..exceptions import NetworkError, UpstreamFormatError
from .image_service import ImageService

logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()


class RemoteBackgroundService:
    """
    Client for a hosted background-removal endpoint.

    Uploads the encoded photo as multipart form data and expects a JSON reply
    carrying the cutout as a base64 PNG at results[0].entities[0].image.
    One attempt per call; the caller decides what to do on failure.
    """

    def __init__(self, url: str | None = None, timeout: float | None = None):
        self.url = url or os.getenv(
            "BG_API_URL", "https://demo.api4ai.cloud/img-bg-removal/v1/general/results"
        )
        self.timeout = timeout if timeout is not None else float(os.getenv("BG_API_TIMEOUT", "30"))
        self.image_service = ImageService()

    def remove_background(self, image_bytes: bytes, filename: str = "leaf.png") -> Image:
        """
        Args:
            image_bytes: encoded image (PNG/JPEG/...)
        Returns:
            Image: RGBA cutout, background transparent
        Raises:
            NetworkError: transport failure, timeout or non-2xx status
            UpstreamFormatError: reply is not the expected JSON / image
        """
        try:
            resp = requests.post(self.url, files={"image": (filename, image_bytes)},
                                 timeout=self.timeout)
        except requests.RequestException as err:
            raise NetworkError(f"Background removal request failed: {err}") from err

        if not 200 <= resp.status_code < 300:
            raise NetworkError(f"Background removal returned HTTP {resp.status_code}")

        try:
            payload = resp.json()
            encoded = payload["results"][0]["entities"][0]["image"]
        except (ValueError, KeyError, IndexError, TypeError) as err:
            raise UpstreamFormatError(f"Unexpected background removal reply: {err}") from err

        if not isinstance(encoded, str):
            raise UpstreamFormatError("Background removal reply image is not a string")
        if encoded.startswith("data:"):
            encoded = encoded.split(",", 1)[-1]

        try:
            cutout = self.image_service.decode(base64.b64decode(encoded, validate=True))
        except (binascii.Error, ValueError) as err:
            raise UpstreamFormatError(f"Background removal image could not be decoded: {err}") from err

        logger.info("Remote background removal returned %dx%d cutout", cutout.width, cutout.height)
        return cutout
