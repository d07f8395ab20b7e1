class LeafHealthError(Exception):
    """Base class for every error raised by leafhealth."""


class InvalidBufferError(LeafHealthError, ValueError):
    """Pixel buffer dimensions disagree with its data. Aborts the pipeline."""


class RemoteBackgroundError(LeafHealthError):
    """The remote background-removal service could not produce a cutout."""


class NetworkError(RemoteBackgroundError):
    """Connection failure, timeout or non-2xx reply from the remote service."""


class UpstreamFormatError(RemoteBackgroundError):
    """The remote service replied, but not with a usable image."""
