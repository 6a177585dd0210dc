"""Waveform packet codec. Marker framing is added by the writer, not here."""
from __future__ import annotations

import hashlib
import io
import struct
from dataclasses import dataclass, field
from typing import BinaryIO

from dgs_core.protocol import PACKET_HEADER_FMT, PACKET_HEADER_LEN, SAMPLE_LEN
from dgs_core.stream import read_exact


@dataclass(frozen=True)
class WaveformPacket:
    """One digitized waveform.

    The sample count on the wire is always len(values), so the two can never
    disagree in memory.
    """

    baseline: int
    channel_id: int
    values: tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.values, tuple):
            object.__setattr__(self, "values", tuple(self.values))

    @property
    def sample_count(self) -> int:
        return len(self.values)

    def sample_bytes(self) -> bytes:
        return struct.pack(f">{len(self.values)}H", *self.values)

    def content_hash(self) -> str:
        return hashlib.sha256(self.sample_bytes()).hexdigest()

    def encode(self) -> bytes:
        header = struct.pack(PACKET_HEADER_FMT, self.sample_count, self.baseline, self.channel_id)
        return header + self.sample_bytes()

    @classmethod
    def read_from(cls, f: BinaryIO) -> "WaveformPacket":
        """Read the 8-byte header, then exactly the number of samples it declares."""
        count, baseline, channel_id = struct.unpack(
            PACKET_HEADER_FMT, read_exact(f, PACKET_HEADER_LEN, "packet header")
        )
        payload = read_exact(f, count * SAMPLE_LEN, "packet samples")
        values = struct.unpack(f">{count}H", payload)
        return cls(baseline=baseline, channel_id=channel_id, values=values)

    @classmethod
    def decode(cls, data: bytes) -> "WaveformPacket":
        return cls.read_from(io.BytesIO(data))
