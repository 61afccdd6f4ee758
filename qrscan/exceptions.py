class QRScanError(Exception):
    """Base class for errors raised by qrscan."""


class ImageLoadError(QRScanError):
    """The source image could not be fetched, read or decoded into pixels."""


class DecoderUnavailableError(QRScanError):
    """No usable QR decoder is installed or injected."""
