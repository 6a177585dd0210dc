"""PSD channel settings record: fixed 46-byte layout with an LED/CFD variant."""
from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import BinaryIO, Union

from dgs_core.protocol import (
    CFD_VARIANT_FMT,
    LED_VARIANT_FMT,
    SETTINGS_FIXED_FMT,
    SETTINGS_RECORD_LEN,
)
from dgs_core.stream import TruncatedInput, read_exact


class FilterType(enum.IntEnum):
    LED = 0
    CFD = 1


@dataclass(frozen=True)
class LedFilter:
    threshold_up: int = 0
    threshold_down: int = 0

    filter_type = FilterType.LED


@dataclass(frozen=True)
class CfdFilter:
    delay: int = 0
    threshold: int = 0
    fraction: float = 0.0

    filter_type = FilterType.CFD


Filter = Union[LedFilter, CfdFilter]


@dataclass(frozen=True)
class SettingsRecord:
    """Acquisition settings for one channel.

    Only the variant selected by the filter type is stored, so equality never
    looks at the inactive variant. On the wire the LED variant is followed by
    an 8-byte zero pad in place of the CFD fraction, keeping both at 46 bytes.
    """

    channel_id: int
    wave_length: int
    pre_trigger_length: int
    trigger_hold_off: int
    pre_gate_length: int
    short_gate_length: int
    long_gate_length: int
    filter: Filter

    @property
    def filter_type(self) -> FilterType:
        return self.filter.filter_type

    def encode(self) -> bytes:
        fixed = struct.pack(
            SETTINGS_FIXED_FMT,
            self.channel_id,
            self.wave_length,
            self.pre_trigger_length,
            self.trigger_hold_off,
            self.pre_gate_length,
            self.short_gate_length,
            self.long_gate_length,
            int(self.filter_type),
        )
        if isinstance(self.filter, LedFilter):
            variant = struct.pack(LED_VARIANT_FMT, self.filter.threshold_up, self.filter.threshold_down)
        else:
            variant = struct.pack(
                CFD_VARIANT_FMT, self.filter.delay, self.filter.threshold, self.filter.fraction
            )
        return fixed + variant

    @classmethod
    def decode(cls, data: bytes, offset: int = 0) -> tuple["SettingsRecord", int]:
        """Decode one record from `data` at `offset`; returns (record, bytes_consumed)."""
        if len(data) - offset < SETTINGS_RECORD_LEN:
            raise TruncatedInput(
                f"Settings record needs {SETTINGS_RECORD_LEN} bytes, got {max(len(data) - offset, 0)}"
            )

        fixed_len = struct.calcsize(SETTINGS_FIXED_FMT)
        (
            channel_id,
            wave_length,
            pre_trigger_length,
            trigger_hold_off,
            pre_gate_length,
            short_gate_length,
            long_gate_length,
            raw_type,
        ) = struct.unpack_from(SETTINGS_FIXED_FMT, data, offset)

        try:
            filter_type = FilterType(raw_type)
        except ValueError:
            raise ValueError(f"Unknown filter type {raw_type} at offset {offset}") from None

        if filter_type is FilterType.LED:
            up, down = struct.unpack_from(LED_VARIANT_FMT, data, offset + fixed_len)
            flt: Filter = LedFilter(threshold_up=up, threshold_down=down)
        else:
            delay, threshold, fraction = struct.unpack_from(CFD_VARIANT_FMT, data, offset + fixed_len)
            flt = CfdFilter(delay=delay, threshold=threshold, fraction=fraction)

        record = cls(
            channel_id=channel_id,
            wave_length=wave_length,
            pre_trigger_length=pre_trigger_length,
            trigger_hold_off=trigger_hold_off,
            pre_gate_length=pre_gate_length,
            short_gate_length=short_gate_length,
            long_gate_length=long_gate_length,
            filter=flt,
        )
        return record, SETTINGS_RECORD_LEN

    @classmethod
    def read_from(cls, f: BinaryIO) -> "SettingsRecord":
        record, _ = cls.decode(read_exact(f, SETTINGS_RECORD_LEN, "settings record"))
        return record

    def to_row(self) -> dict:
        """Flat row for tabular export. Inactive variant columns are None."""
        led = self.filter if isinstance(self.filter, LedFilter) else None
        cfd = self.filter if isinstance(self.filter, CfdFilter) else None
        return {
            "channel_id": self.channel_id,
            "wave_length": self.wave_length,
            "pre_trigger_length": self.pre_trigger_length,
            "trigger_hold_off": self.trigger_hold_off,
            "pre_gate_length": self.pre_gate_length,
            "short_gate_length": self.short_gate_length,
            "long_gate_length": self.long_gate_length,
            "filter_type": self.filter_type.name,
            "led_threshold_up": led.threshold_up if led else None,
            "led_threshold_down": led.threshold_down if led else None,
            "cfd_delay": cfd.delay if cfd else None,
            "cfd_threshold": cfd.threshold if cfd else None,
            "cfd_fraction": cfd.fraction if cfd else None,
        }


def encode_settings(records) -> bytes:
    return b"".join(r.encode() for r in records)


def decode_settings(data: bytes, count: int) -> list[SettingsRecord]:
    records: list[SettingsRecord] = []
    offset = 0
    for _ in range(count):
        record, used = SettingsRecord.decode(data, offset)
        records.append(record)
        offset += used
    return records
