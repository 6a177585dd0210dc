"""DGS file to parquet export."""
from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from dgs_file.reader import DgsReader
from dgs_verify.logic import FileValidator

SETTINGS_SCHEMA = pa.schema(
    [
        ("channel_id", pa.uint16()),
        ("wave_length", pa.uint32()),
        ("pre_trigger_length", pa.uint32()),
        ("trigger_hold_off", pa.uint32()),
        ("pre_gate_length", pa.uint32()),
        ("short_gate_length", pa.uint32()),
        ("long_gate_length", pa.uint32()),
        ("filter_type", pa.string()),
        ("led_threshold_up", pa.uint32()),
        ("led_threshold_down", pa.uint32()),
        ("cfd_delay", pa.uint32()),
        ("cfd_threshold", pa.uint32()),
        ("cfd_fraction", pa.float64()),
    ]
)

WAVEFORMS_SCHEMA = pa.schema(
    [
        ("packet_index", pa.int64()),
        ("offset", pa.int64()),
        ("length", pa.int64()),
        ("channel_id", pa.uint16()),
        ("baseline", pa.uint16()),
        ("sample_count", pa.uint32()),
        ("content_hash", pa.string()),
    ]
)


def _write_table(rows: list[dict], schema: pa.Schema, path: Path) -> None:
    # Build from pylist so nullable integer columns keep their declared types.
    table = pa.Table.from_pylist(rows, schema=schema)
    pq.write_table(table, path)


def compile_dgs(dgs_path: Path, out_path: Path) -> dict:
    """Validate and read a DGS file, then write settings/waveform tables and a manifest."""
    validator = FileValidator(dgs_path)
    validator.validate()
    if not validator.readable:
        raise ValueError(f"FATAL: {dgs_path} is not readable ({validator.error})")

    with DgsReader(dgs_path, validator=validator) as reader:
        settings = reader.read_settings()
        waveforms: list[dict] = []
        for index, packet in enumerate(reader.iter_waveforms()):
            offset, length = validator.packet_index[index]
            waveforms.append(
                {
                    "packet_index": index,
                    "offset": offset,
                    "length": length,
                    "channel_id": packet.channel_id,
                    "baseline": packet.baseline,
                    "sample_count": packet.sample_count,
                    "content_hash": packet.content_hash(),
                }
            )

    out_path = Path(out_path)
    out_path.mkdir(parents=True, exist_ok=True)

    _write_table([s.to_row() for s in settings], SETTINGS_SCHEMA, out_path / "settings.parquet")
    _write_table(waveforms, WAVEFORMS_SCHEMA, out_path / "waveforms.parquet")

    manifest = validator.report()
    manifest["source"] = Path(dgs_path).name
    manifest["header_md5"] = validator.header_digest.hex()
    manifest["files"] = ["settings.parquet", "waveforms.parquet"]

    man_bytes = json.dumps(manifest, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    (out_path / "manifest.json").write_bytes(man_bytes)
    return manifest


def load_waveform_index(out_path: Path) -> pd.DataFrame:
    return pq.read_table(Path(out_path) / "waveforms.parquet").to_pandas()
