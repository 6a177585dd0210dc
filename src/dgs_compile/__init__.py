"""DGS Compile - parquet export of validated DGS files."""
from .export import compile_dgs, load_waveform_index

__all__ = ["compile_dgs", "load_waveform_index"]
