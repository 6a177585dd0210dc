"""DGS File - container writer and validated reader."""
from .reader import DgsReader, ReadError
from .writer import DgsWriter, default_filename

__all__ = ["DgsReader", "DgsWriter", "ReadError", "default_filename"]
