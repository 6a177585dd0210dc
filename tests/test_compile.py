import json

import pyarrow.parquet as pq
import pytest

from dgs_compile.export import compile_dgs, load_waveform_index
from dgs_core.protocol import body_offset, framed_packet_len


def test_compile_tables(dgs_file, settings, waveforms, tmp_path):
    out = tmp_path / "tables"
    manifest = compile_dgs(dgs_file, out)

    assert manifest["status"] == "PASS"
    assert manifest["valid_packets"] == 5
    assert len(manifest["header_md5"]) == 32

    s = pq.read_table(out / "settings.parquet").to_pylist()
    assert [row["channel_id"] for row in s] == [0, 1, 2]
    assert s[0]["filter_type"] == "LED"
    assert s[0]["cfd_fraction"] is None
    assert s[1]["led_threshold_down"] == 0xFFFFFFFF
    assert s[2]["cfd_fraction"] == 0.25
    assert s[2]["led_threshold_up"] is None

    df = load_waveform_index(out)
    assert list(df["sample_count"]) == [w.sample_count for w in waveforms]
    assert list(df["content_hash"]) == [w.content_hash() for w in waveforms]
    assert int(df["offset"].iloc[0]) == body_offset(len(settings))
    assert list(df["length"]) == [framed_packet_len(w.sample_count) for w in waveforms]

    on_disk = json.loads((out / "manifest.json").read_text(encoding="utf-8"))
    assert on_disk == manifest


def test_compile_partial_file(dgs_file, settings, tmp_path):
    b = bytearray(dgs_file.read_bytes())
    b[body_offset(len(settings))] ^= 0x01
    dgs_file.write_bytes(bytes(b))

    with pytest.warns(UserWarning):
        manifest = compile_dgs(dgs_file, tmp_path / "tables")

    assert manifest["status"] == "PARTIAL"
    assert manifest["valid_packets"] == 0
    assert pq.read_table(tmp_path / "tables" / "waveforms.parquet").num_rows == 0
    assert pq.read_table(tmp_path / "tables" / "settings.parquet").num_rows == 3


def test_compile_refuses_corrupt_header(dgs_file, tmp_path):
    b = bytearray(dgs_file.read_bytes())
    b[0] ^= 0x01
    dgs_file.write_bytes(bytes(b))

    with pytest.warns(UserWarning):
        with pytest.raises(ValueError, match="FATAL"):
            compile_dgs(dgs_file, tmp_path / "tables")
    assert not (tmp_path / "tables").exists()
