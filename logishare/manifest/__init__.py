"""Manifest scanner — recursive walk + streaming SHA-256 per file."""

from logishare.manifest.hasher import Hasher
from logishare.manifest.ordering import natural_key
from logishare.manifest.scanner import scan_package, scan_package_async, validate_package

__all__ = [
    "Hasher",
    "natural_key",
    "scan_package",
    "scan_package_async",
    "validate_package",
]
