import sys
from pathlib import Path

# Signature(8) + Count(2) + Settings(n x 46) + MD5(16)
HEADER_FIXED = 8 + 2 + 16
SETTINGS_RECORD_LEN = 46

def main():
    if len(sys.argv) not in (2, 3):
        print("Usage: corrupt_one_byte.py <file> [offset]")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    b = bytearray(p.read_bytes())
    if len(b) < HEADER_FIXED:
        print("File too small to corrupt safely.")
        raise SystemExit(2)

    if len(sys.argv) == 3:
        idx = int(sys.argv[2], 0)
    else:
        # Flip a byte in the prefix marker of the first waveform packet.
        settings_number = int(bytes(b[8:10]).hex(), 16)
        idx = HEADER_FIXED + settings_number * SETTINGS_RECORD_LEN

    if idx >= len(b):
        print(f"Offset {idx} is past the end of {p} ({len(b)} bytes).")
        raise SystemExit(2)

    b[idx] ^= 0x01
    p.write_bytes(bytes(b))
    print(f"Corrupted 1 byte at offset {idx} in {p}")

if __name__ == "__main__":
    main()
