import enum


class ValidationError(enum.Enum):
    NONE = "None"
    UNABLE_TO_OPEN = "UnableToOpen"
    INVALID_SIGNATURE = "InvalidSignature"
    READ_ERROR = "ReadError"
    WRONG_HEADER_HASH = "WrongHeaderHash"
    MALFORMED_WAVEFORM_PACKET = "MalformedWaveformPacket"
    WRONG_WAVEFORM_PACKET = "WrongWaveformPacket"

    def __str__(self) -> str:
        return self.value


ERRORS = {
    ValidationError.NONE: "File is well-formed",
    ValidationError.UNABLE_TO_OPEN: "File could not be opened for reading",
    ValidationError.INVALID_SIGNATURE: "File signature does not match the DGS template",
    ValidationError.READ_ERROR: "File ended inside the signature or settings count",
    ValidationError.WRONG_HEADER_HASH: "Header MD5 does not match the settings block",
    ValidationError.MALFORMED_WAVEFORM_PACKET: "Waveform body is truncated or corrupted after the valid packets",
    ValidationError.WRONG_WAVEFORM_PACKET: "Waveform packet content is invalid",
}

# Verdicts a reader may proceed on, using the validator's counts.
READABLE = frozenset({ValidationError.NONE, ValidationError.MALFORMED_WAVEFORM_PACKET})

# Scan statuses for a single framed packet
PACKET_VERIFIED = "VERIFIED"
PACKET_BAD_PREFIX = "BAD_PREFIX"
PACKET_TORN_COUNT = "TORN_COUNT"
PACKET_TORN_PAYLOAD = "TORN_PAYLOAD"
PACKET_BAD_POSTFIX = "BAD_POSTFIX"
