from pathlib import Path

import pytest

from dgs_core.packet import WaveformPacket
from dgs_core.settings import CfdFilter, LedFilter, SettingsRecord
from dgs_file.writer import DgsWriter


def make_settings() -> list[SettingsRecord]:
    return [
        SettingsRecord(0, 1024, 64, 8, 16, 40, 300, LedFilter(threshold_up=900, threshold_down=850)),
        SettingsRecord(1, 2048, 128, 16, 20, 60, 500, LedFilter(threshold_up=0, threshold_down=0xFFFFFFFF)),
        SettingsRecord(2, 512, 32, 4, 12, 30, 200, CfdFilter(delay=6, threshold=120, fraction=0.25)),
    ]


def make_waveforms() -> list[WaveformPacket]:
    return [
        WaveformPacket(baseline=100, channel_id=0, values=(100, 101, 350, 900, 420, 130)),
        WaveformPacket(baseline=98, channel_id=1, values=()),
        WaveformPacket(baseline=0, channel_id=2, values=tuple(range(0, 2000, 7))),
        WaveformPacket(baseline=0xFFFF, channel_id=0xFFFF, values=(0xFFFF, 0, 0xFFFF)),
        WaveformPacket(baseline=512, channel_id=1, values=(7,) * 33),
    ]


def write_dgs(path: Path, settings, waveforms) -> Path:
    with DgsWriter(path) as writer:
        writer.write_settings(settings)
        writer.write_waveforms(waveforms)
    return path


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def waveforms():
    return make_waveforms()


@pytest.fixture
def dgs_file(tmp_path, settings, waveforms) -> Path:
    return write_dgs(tmp_path / "output_fixture.dgs", settings, waveforms)
