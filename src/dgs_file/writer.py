from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Iterable, Sequence
from warnings import warn

from dgs_core.packet import WaveformPacket
from dgs_core.protocol import (
    DEFAULT_DATETIME,
    DEFAULT_FILENAME,
    PACKET_MARKER,
    SETTINGS_COUNT_LEN,
    U16_MAX,
    U32_MAX,
    VERSION_MAJOR,
    VERSION_MINOR,
    VERSION_PATCH,
)
from dgs_core.settings import SettingsRecord, encode_settings
from dgs_core.stream import encode_hex_count
from dgs_verify.digest import build_signature, header_hash


def default_filename(tag: str = "test") -> Path:
    stamp = datetime.now().strftime(DEFAULT_DATETIME)
    return Path(DEFAULT_FILENAME.format(stamp=stamp, tag=tag))


class DgsWriter:
    """Producer side of the container.

    The signature is written on open. Inputs are trusted apart from the two
    size limits; a refused write leaves what is already on disk in place.
    """

    def __init__(
        self,
        path: str | Path | None = None,
        version: tuple[str, str, str] = (VERSION_MAJOR, VERSION_MINOR, VERSION_PATCH),
    ):
        self.path = Path(path) if path is not None else default_filename()
        self._f = open(self.path, "wb")
        try:
            self._f.write(build_signature(*version))
        except BaseException:
            self._f.close()
            raise

    def __enter__(self) -> "DgsWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._f.closed

    @property
    def filename(self) -> str:
        return str(self.path) if self.path.exists() else ""

    def write_settings(self, settings: Sequence[SettingsRecord]) -> bool:
        """Write the header: count, records, MD5 over both."""
        if len(settings) > U16_MAX:
            warn(f"Invalid settings array size: {len(settings)} > {U16_MAX}")
            return False

        buffer = encode_hex_count(len(settings), SETTINGS_COUNT_LEN) + encode_settings(settings)
        self._f.write(buffer)
        self._f.write(header_hash(buffer[:SETTINGS_COUNT_LEN], buffer[SETTINGS_COUNT_LEN:]))
        return True

    def write_waveforms(self, waveforms: Iterable[WaveformPacket]) -> int:
        """Frame and write each packet. Oversized packets are skipped; returns the number written."""
        written = 0
        for index, waveform in enumerate(waveforms):
            if waveform.sample_count > U32_MAX:
                warn(f"Invalid waveform size at packet {index}: {waveform.sample_count} > {U32_MAX}")
                continue
            self._f.write(PACKET_MARKER + waveform.encode() + PACKET_MARKER)
            written += 1
        return written

    def close(self) -> None:
        if not self._f.closed:
            self._f.close()
