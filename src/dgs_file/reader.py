from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Iterator
from warnings import warn

from dgs_core.packet import WaveformPacket
from dgs_core.protocol import MARKER_LEN, SETTINGS_OFFSET, SETTINGS_RECORD_LEN, body_offset
from dgs_core.settings import SettingsRecord, decode_settings
from dgs_core.stream import TruncatedInput
from dgs_verify.const import READABLE, ValidationError
from dgs_verify.logic import FileValidator, ValidatorState


class ReadError(ValueError):
    pass


class DgsReader:
    """Second pass over a validated file.

    Reads exactly `settings_number` records and `valid_packets` packets as
    counted by the validator, so a tail the validator rejected is never touched.
    """

    def __init__(self, path: str | Path, validator: FileValidator | None = None):
        self.path = Path(path)
        self.validator = validator or FileValidator(self.path)
        self._f: BinaryIO | None = None

        if self.validator.state is ValidatorState.START:
            self.validator.validate()

        if self.validator.error not in READABLE:
            warn(f"Failed to validate {self.path}: {self.validator.error}")
            return

        try:
            self._f = open(self.path, "rb")
        except OSError as e:
            raise ReadError(f"Failed to open file for reading: {e}") from e

    def __enter__(self) -> "DgsReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def errors(self) -> ValidationError:
        return self.validator.error

    def _stream(self) -> BinaryIO:
        if self.errors not in READABLE:
            raise ReadError(f"FATAL: refusing to read {self.path}: {self.errors}")
        if self._f is None or self._f.closed:
            raise ReadError("File is not open for reading.")
        return self._f

    def _read(self, n: int, what: str) -> bytes:
        data = self._stream().read(n)
        if len(data) != n:
            raise ReadError(f"Failed to read {what}: expected {n} bytes, got {len(data)}")
        return data

    def read_settings(self) -> list[SettingsRecord]:
        f = self._stream()
        count = self.validator.settings_number

        f.seek(SETTINGS_OFFSET)
        data = self._read(count * SETTINGS_RECORD_LEN, "settings block")
        try:
            records = decode_settings(data, count)
        except ValueError as e:
            raise ReadError(str(e)) from e

        f.seek(body_offset(count))
        return records

    def iter_waveforms(self) -> Iterator[WaveformPacket]:
        f = self._stream()
        f.seek(body_offset(self.validator.settings_number))

        for index in range(self.validator.valid_packets):
            self._read(MARKER_LEN, "waveform prefix")
            try:
                packet = WaveformPacket.read_from(f)
            except TruncatedInput as e:
                raise ReadError(f"Failed to read waveform {index}: {e}") from e
            self._read(MARKER_LEN, "waveform postfix")
            yield packet

    def read_waveforms(self) -> list[WaveformPacket]:
        return list(self.iter_waveforms())

    def close(self) -> None:
        if self._f is not None and not self._f.closed:
            self._f.close()
