import struct
import sys

import pytest

from dgs_core.protocol import SETTINGS_RECORD_LEN, U16_MAX, U32_MAX
from dgs_core.settings import (
    CfdFilter,
    FilterType,
    LedFilter,
    SettingsRecord,
    decode_settings,
    encode_settings,
)
from dgs_core.stream import TruncatedInput


def _record(flt, value=0, channel_id=0):
    return SettingsRecord(channel_id, value, value, value, value, value, value, flt)


@pytest.mark.parametrize(
    "record",
    [
        _record(LedFilter(0, 0)),
        _record(LedFilter(U32_MAX, U32_MAX), value=U32_MAX, channel_id=U16_MAX),
        _record(CfdFilter(0, 0, 0.0)),
        _record(CfdFilter(U32_MAX, U32_MAX, sys.float_info.max), value=U32_MAX, channel_id=U16_MAX),
        _record(CfdFilter(3, 7, -0.5), value=12345),
    ],
)
def test_roundtrip_both_variants(record):
    data = record.encode()
    assert len(data) == SETTINGS_RECORD_LEN

    decoded, used = SettingsRecord.decode(data)
    assert used == SETTINGS_RECORD_LEN
    assert decoded == record
    assert decoded.filter_type is record.filter_type


def test_led_variant_is_zero_padded_to_fixed_width():
    data = _record(LedFilter(threshold_up=5, threshold_down=6), value=1).encode()

    assert struct.unpack(">i", data[26:30]) == (FilterType.LED,)
    assert struct.unpack(">II", data[30:38]) == (5, 6)
    assert data[38:] == b"\x00" * 8


def test_cfd_variant_layout_is_big_endian():
    data = _record(CfdFilter(delay=1, threshold=2, fraction=0.5)).encode()

    assert data[26:30] == b"\x00\x00\x00\x01"
    assert data[30:38] == b"\x00\x00\x00\x01\x00\x00\x00\x02"
    assert struct.unpack(">d", data[38:]) == (0.5,)


def test_fixed_fields_in_declared_order():
    record = SettingsRecord(0x0102, 3, 4, 5, 6, 7, 8, LedFilter())
    data = record.encode()

    assert data[:2] == b"\x01\x02"
    assert struct.unpack(">6I", data[2:26]) == (3, 4, 5, 6, 7, 8)


def test_led_padding_is_ignored_on_decode():
    data = bytearray(_record(LedFilter(1, 2)).encode())
    data[38:] = b"\xff" * 8

    decoded, _ = SettingsRecord.decode(bytes(data))
    assert decoded.filter == LedFilter(1, 2)


def test_records_with_different_variants_differ():
    assert _record(LedFilter(1, 2)) != _record(CfdFilter(1, 2, 0.0))
    assert _record(LedFilter(1, 2)) != _record(LedFilter(1, 3))


def test_decode_short_input_is_truncated():
    data = _record(LedFilter()).encode()
    with pytest.raises(TruncatedInput):
        SettingsRecord.decode(data[:-1])
    with pytest.raises(TruncatedInput):
        SettingsRecord.decode(data, offset=1)


def test_decode_unknown_filter_type():
    data = bytearray(_record(LedFilter()).encode())
    data[26:30] = struct.pack(">i", 7)
    with pytest.raises(ValueError, match="Unknown filter type"):
        SettingsRecord.decode(bytes(data))


def test_decode_at_offset(settings):
    data = encode_settings(settings)
    assert len(data) == len(settings) * SETTINGS_RECORD_LEN

    record, used = SettingsRecord.decode(data, offset=2 * SETTINGS_RECORD_LEN)
    assert record == settings[2]
    assert decode_settings(data, len(settings)) == settings


def test_to_row_nulls_inactive_variant(settings):
    led_row = settings[0].to_row()
    cfd_row = settings[2].to_row()

    assert led_row["filter_type"] == "LED"
    assert led_row["led_threshold_up"] == 900
    assert led_row["cfd_fraction"] is None
    assert cfd_row["filter_type"] == "CFD"
    assert cfd_row["cfd_fraction"] == 0.25
    assert cfd_row["led_threshold_down"] is None
