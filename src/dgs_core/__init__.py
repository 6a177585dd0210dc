"""DGS Core - container layout and record codecs."""
from .packet import WaveformPacket
from .settings import CfdFilter, FilterType, LedFilter, SettingsRecord
from .stream import TruncatedInput

__all__ = [
    "WaveformPacket",
    "SettingsRecord",
    "FilterType",
    "LedFilter",
    "CfdFilter",
    "TruncatedInput",
]
