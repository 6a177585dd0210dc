"""DGS Verify - single-pass container validation."""
from .const import ValidationError
from .logic import FileValidator, PacketCheck, ValidatorState, scan_packets, verify_file

__all__ = ["ValidationError", "FileValidator", "PacketCheck", "ValidatorState", "scan_packets", "verify_file"]
