"""Simulated PSD acquisition: generate, write, validate, read back, compare."""
import random
from pathlib import Path

import click

from dgs_core.packet import WaveformPacket
from dgs_core.protocol import (
    OUTPUT_GLOB,
    SIM_DEFAULT_MAX_VALUES,
    SIM_MAX_PACKETS,
    U16_MAX,
    U32_MAX,
    WAVEFORM_MAX_VALUES,
    WAVEFORM_MIN_VALUES,
)
from dgs_core.settings import CfdFilter, LedFilter, SettingsRecord
from dgs_file.reader import DgsReader
from dgs_file.writer import DgsWriter, default_filename


def generate_random_settings(channel_id: int, rng: random.Random) -> SettingsRecord:
    def u32() -> int:
        return rng.randint(0, U32_MAX)

    if rng.random() < 0.5:
        flt = LedFilter(threshold_up=u32(), threshold_down=u32())
    else:
        flt = CfdFilter(delay=u32(), threshold=u32(), fraction=float(rng.getrandbits(64)))

    return SettingsRecord(
        channel_id=channel_id,
        wave_length=u32(),
        pre_trigger_length=u32(),
        trigger_hold_off=u32(),
        pre_gate_length=u32(),
        short_gate_length=u32(),
        long_gate_length=u32(),
        filter=flt,
    )


def generate_random_waveform(rng: random.Random, min_values: int, max_values: int) -> WaveformPacket:
    n = rng.randint(min_values, max_values)
    return WaveformPacket(
        baseline=rng.randint(0, U16_MAX),
        channel_id=rng.randint(0, U16_MAX),
        values=tuple(rng.randint(0, U16_MAX) for _ in range(n)),
    )


def clear_directory(directory: Path) -> None:
    for p in directory.glob(OUTPUT_GLOB):
        if not p.is_file():
            continue
        try:
            p.unlink()
        except OSError as e:
            print(f"Failed to remove file: {p} ({e})")


@click.command()
@click.option("-s", "--settings-number", type=int, default=0, help="Number of settings records.")
@click.option("-w", "--waveform-number", type=int, default=0, help="Number of waveform packets.")
@click.option("-d", "--delete", is_flag=True, help="Delete all output files.")
@click.option("--out", "out_dir", type=click.Path(file_okay=False, path_type=Path), default=Path("."))
@click.option("--min-values", type=int, default=WAVEFORM_MIN_VALUES, show_default=True)
@click.option("--max-values", type=int, default=SIM_DEFAULT_MAX_VALUES, show_default=True)
@click.option("--seed", type=int, default=None, help="Seed for reproducible files.")
def main(settings_number, waveform_number, delete, out_dir, min_values, max_values, seed):
    """Write a random DGS file, validate it and compare what reads back."""
    if delete:
        print("Deleting output files")
        clear_directory(out_dir)
        raise SystemExit(0)

    rng = random.Random(seed)
    if settings_number == 0:
        settings_number = rng.randint(1, 9)
    if waveform_number == 0:
        waveform_number = rng.randint(1, SIM_MAX_PACKETS)
    max_values = min(max_values, WAVEFORM_MAX_VALUES)
    min_values = min(min_values, max_values)

    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / default_filename().name

    print(f"Generating {settings_number} psd settings")
    settings = [generate_random_settings(i, rng) for i in range(settings_number)]

    print(f"Generating {waveform_number} waveform packets")
    waveforms = [generate_random_waveform(rng, min_values, max_values) for _ in range(waveform_number)]

    with DgsWriter(path) as writer:
        print("Writing psd settings")
        writer.write_settings(settings)
        print("Writing waveform packets")
        writer.write_waveforms(waveforms)

    print("Validating file")
    with DgsReader(path) as reader:
        print(f"Verdict: {reader.errors}")
        settings_read = reader.read_settings()
        waveforms_read = reader.read_waveforms()

    print("Header match" if settings_read == settings else "Header differ")
    print("Waveform match" if waveforms_read == waveforms else "Waveform differ")
    print(f"GENERATED: {path}")

    if settings_read != settings or waveforms_read != waveforms:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
