"""DGS file validation.

Single forward pass: signature, then header hash, then packet framing.
Everything up to the header hash is fatal. A framing fault in the waveform
body only ends the scan: packets confirmed before it stay valid.
"""
from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator
from warnings import warn

from dgs_core.protocol import (
    HEADER_HASH_LEN,
    MARKER_LEN,
    PACKET_COUNT_LEN,
    PACKET_HEADER_LEN,
    PACKET_MARKER,
    SAMPLE_LEN,
    SETTINGS_COUNT_LEN,
    SETTINGS_RECORD_LEN,
    SIGNATURE_LEN,
    framed_packet_len,
)
from dgs_core.stream import TruncatedInput, decode_hex_count, read_exact

from .const import (
    ERRORS,
    PACKET_BAD_POSTFIX,
    PACKET_BAD_PREFIX,
    PACKET_TORN_COUNT,
    PACKET_TORN_PAYLOAD,
    PACKET_VERIFIED,
    READABLE,
    ValidationError,
)
from .digest import expected_signature, header_hash, signature_version


class ValidatorState(enum.Enum):
    START = "start"
    SIGNATURE_CHECKED = "signature_checked"
    HEADER_CHECKED = "header_checked"
    SCANNING_PACKETS = "scanning_packets"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PacketCheck:
    index: int
    offset: int
    sample_count: int | None
    status: str

    @property
    def verified(self) -> bool:
        return self.status == PACKET_VERIFIED

    @property
    def length(self) -> int:
        return framed_packet_len(self.sample_count or 0)


def scan_packets(f: BinaryIO, end: int) -> Iterator[PacketCheck]:
    """Walk framed packets from the current position up to `end`.

    Yields one check per packet. Stops after the first check that is not
    VERIFIED, and returns quietly when the stream ends on a packet boundary.
    Sample payloads are skipped, not decoded.
    """
    index = 0
    while True:
        offset = f.tell()
        if offset >= end:
            return

        prefix = f.read(MARKER_LEN)
        if prefix != PACKET_MARKER:
            yield PacketCheck(index, offset, None, PACKET_BAD_PREFIX)
            return

        count_bytes = f.read(PACKET_COUNT_LEN)
        if len(count_bytes) != PACKET_COUNT_LEN:
            yield PacketCheck(index, offset, None, PACKET_TORN_COUNT)
            return
        count = decode_hex_count(count_bytes)

        # Baseline and channel id follow the count, then the samples.
        data_size = (PACKET_HEADER_LEN - PACKET_COUNT_LEN) + count * SAMPLE_LEN
        if end - f.tell() < data_size:
            yield PacketCheck(index, offset, count, PACKET_TORN_PAYLOAD)
            return
        f.seek(data_size, os.SEEK_CUR)

        postfix = f.read(MARKER_LEN)
        if postfix != PACKET_MARKER:
            yield PacketCheck(index, offset, count, PACKET_BAD_POSTFIX)
            return

        yield PacketCheck(index, offset, count, PACKET_VERIFIED)
        index += 1


class FileValidator:
    """Classifies a DGS file and exposes the counts a reader needs.

    After `validate()` the following stay queryable:
      - error: the verdict
      - settings_number: header record count (once the header hash matched)
      - valid_packets: packets whose framing was confirmed
      - packet_index: (offset, framed length) of every confirmed packet
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._reset()

    def _reset(self) -> None:
        self.state = ValidatorState.START
        self.error = ValidationError.NONE
        self.settings_number = 0
        self.valid_packets = 0
        self.version: tuple[int, int, int] | None = None
        self.header_digest: bytes | None = None
        self.packet_index: list[tuple[int, int]] = []

    def _fail(self, error: ValidationError) -> ValidationError:
        self.error = error
        self.state = ValidatorState.FAILED
        return error

    def validate(self) -> ValidationError:
        self._reset()
        try:
            f = open(self.path, "rb")
        except OSError as e:
            warn(f"Failed to open file for reading: {e}")
            return self._fail(ValidationError.UNABLE_TO_OPEN)

        with f:
            end = os.fstat(f.fileno()).st_size
            return self.validate_stream(f, end)

    def validate_stream(self, f: BinaryIO, end: int) -> ValidationError:
        """Run the checks over an open stream positioned at the signature."""
        signature = f.read(SIGNATURE_LEN)
        if len(signature) != SIGNATURE_LEN:
            warn(f"Truncated signature: {len(signature)} of {SIGNATURE_LEN} bytes")
            return self._fail(ValidationError.READ_ERROR)

        expected = expected_signature(signature)
        if signature != expected:
            warn(f"Wrong signature: expected {expected.hex()} in file {signature.hex()}")
            return self._fail(ValidationError.INVALID_SIGNATURE)
        self.version = signature_version(signature)
        self.state = ValidatorState.SIGNATURE_CHECKED

        try:
            count_bytes = read_exact(f, SETTINGS_COUNT_LEN, "settings count")
        except TruncatedInput as e:
            warn(str(e))
            return self._fail(ValidationError.READ_ERROR)
        count = decode_hex_count(count_bytes)

        # A corrupted count makes these reads come up short. The hash over
        # whatever was read then cannot match, so that is a header hash fault.
        settings_bytes = f.read(count * SETTINGS_RECORD_LEN)
        stored_hash = f.read(HEADER_HASH_LEN)

        computed_hash = header_hash(count_bytes, settings_bytes)
        if stored_hash != computed_hash:
            if len(settings_bytes) != count * SETTINGS_RECORD_LEN or len(stored_hash) != HEADER_HASH_LEN:
                warn(
                    f"Truncated header: {count} settings need {count * SETTINGS_RECORD_LEN + HEADER_HASH_LEN} "
                    f"bytes, got {len(settings_bytes) + len(stored_hash)}"
                )
            warn(f"Wrong header hash: expected {computed_hash.hex()} in file {stored_hash.hex()}")
            return self._fail(ValidationError.WRONG_HEADER_HASH)
        self.settings_number = count
        self.header_digest = stored_hash
        self.state = ValidatorState.HEADER_CHECKED

        self.state = ValidatorState.SCANNING_PACKETS
        for check in scan_packets(f, end):
            if not check.verified:
                warn(
                    f"Malformed waveform packet {check.index} at offset {check.offset} ({check.status}). "
                    f"Found {self.valid_packets} valid packets."
                )
                self.error = ValidationError.MALFORMED_WAVEFORM_PACKET
                break
            self.valid_packets += 1
            self.packet_index.append((check.offset, check.length))

        self.state = ValidatorState.DONE
        return self.error

    @property
    def readable(self) -> bool:
        return self.state is ValidatorState.DONE and self.error in READABLE

    @property
    def status(self) -> str:
        if self.state is not ValidatorState.DONE:
            return "FAIL"
        return "PASS" if self.error is ValidationError.NONE else "PARTIAL"

    def report(self) -> dict:
        return {
            "status": self.status,
            "error": str(self.error),
            "message": ERRORS[self.error],
            "settings_number": self.settings_number,
            "valid_packets": self.valid_packets,
            "version": list(self.version) if self.version else None,
        }


def verify_file(path: str | Path) -> dict:
    validator = FileValidator(path)
    validator.validate()
    result = validator.report()
    result["path"] = str(path)
    return result
