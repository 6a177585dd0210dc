from __future__ import annotations

import hashlib

from dgs_core.protocol import (
    SIGNATURE_TEMPLATE,
    SIGNATURE_VERSION_SLICE,
    VERSION_MAJOR,
    VERSION_MINOR,
    VERSION_PATCH,
)


def header_hash(count_bytes: bytes, settings_bytes: bytes) -> bytes:
    """MD5 over the encoded count field followed by the encoded settings block."""
    h = hashlib.md5()
    h.update(count_bytes)
    h.update(settings_bytes)
    return h.digest()


def build_signature(major: str = VERSION_MAJOR, minor: str = VERSION_MINOR, patch: str = VERSION_PATCH) -> bytes:
    """Assemble the 8-byte signature from two-digit hex version components."""
    return bytes.fromhex(SIGNATURE_TEMPLATE.format(major=major, minor=minor, patch=patch))


def expected_signature(candidate: bytes) -> bytes:
    """Rebuild the template signature around the version bytes found in `candidate`."""
    major, minor, patch = (f"{b:02x}" for b in candidate[SIGNATURE_VERSION_SLICE])
    return build_signature(major, minor, patch)


def signature_version(signature: bytes) -> tuple[int, int, int]:
    major, minor, patch = signature[SIGNATURE_VERSION_SLICE]
    return major, minor, patch
