"""DGS container protocol constants.

Single source of truth for on-disk magic values and record layouts.
Keep this file stable. Writer, Validator and Reader must remain synchronized.

Layout:
    [Signature(8) | Count(2) | Settings(Count x 46) | MD5(16) | Packets...]
    Packet: [Marker(4) | SampleCount(4) | Baseline(2) | ChannelId(2) | Samples(2 x n) | Marker(4)]
"""
import struct

# Signature: "%DGS" + major + minor + patch + 0xDB
SIGNATURE_TEMPLATE = "25 44 47 53 {major} {minor} {patch} DB"
SIGNATURE_LEN = 8
SIGNATURE_VERSION_SLICE = slice(4, 7)

VERSION_MAJOR = "01"
VERSION_MINOR = "00"
VERSION_PATCH = "0A"

# Waveform packet framing. Prefix and postfix share the same marker.
PACKET_MARKER = b"\xAB\x57\x46\x41"
MARKER_LEN = 4

# Header
SETTINGS_COUNT_LEN = 2
HEADER_HASH_LEN = 16
SETTINGS_OFFSET = SIGNATURE_LEN + SETTINGS_COUNT_LEN

# Settings record: [ChannelId(2) | 6 x u32 | FilterType(4) | Variant(16)] = 46 bytes
SETTINGS_FIXED_FMT = ">H6Ii"
LED_VARIANT_FMT = ">II8x"
CFD_VARIANT_FMT = ">IId"
SETTINGS_RECORD_LEN = 46

# Packet header: [SampleCount(4) | Baseline(2) | ChannelId(2)] = 8 bytes
PACKET_HEADER_FMT = ">IHH"
PACKET_HEADER_LEN = 8
PACKET_COUNT_LEN = 4
SAMPLE_LEN = 2

U16_MAX = 0xFFFF
U32_MAX = 0xFFFFFFFF

# Generator bounds
WAVEFORM_MIN_VALUES = 10000
WAVEFORM_MAX_VALUES = 1000000

# Simulator defaults
SIM_MAX_PACKETS = 9
SIM_DEFAULT_MAX_VALUES = 20000

DEFAULT_FILENAME = "output_{stamp}_{tag}.dgs"
DEFAULT_DATETIME = "%Y_%m_%d__%H_%M_%S"
OUTPUT_GLOB = "output_*"


def body_offset(settings_number: int) -> int:
    """Offset of the first waveform packet for a header of `settings_number` records."""
    return SETTINGS_OFFSET + settings_number * SETTINGS_RECORD_LEN + HEADER_HASH_LEN


def framed_packet_len(sample_count: int) -> int:
    return 2 * MARKER_LEN + PACKET_HEADER_LEN + SAMPLE_LEN * sample_count


# Verify struct sizes at module load
assert struct.calcsize(SETTINGS_FIXED_FMT) + struct.calcsize(LED_VARIANT_FMT) == SETTINGS_RECORD_LEN
assert struct.calcsize(SETTINGS_FIXED_FMT) + struct.calcsize(CFD_VARIANT_FMT) == SETTINGS_RECORD_LEN
assert struct.calcsize(PACKET_HEADER_FMT) == PACKET_HEADER_LEN
