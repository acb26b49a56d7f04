"""Network probes that gather raw observations about a site."""

from .certificate import CertificateProbe
from .hosting import HostingProbe
from .screenshot import ScreenshotCapture
from .storage import CloudinaryUploader, StorageNotConfigured
from .whois_lookup import WhoisLookup

__all__ = [
    "CertificateProbe",
    "HostingProbe",
    "ScreenshotCapture",
    "CloudinaryUploader",
    "StorageNotConfigured",
    "WhoisLookup",
]
