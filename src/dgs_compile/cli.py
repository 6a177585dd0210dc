"""DGS Compile - DGS file to parquet tables."""
from __future__ import annotations

from pathlib import Path

import click

from dgs_compile.export import compile_dgs


@click.command()
@click.argument("dgs", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("out", type=click.Path(path_type=Path))
def main(dgs: Path, out: Path) -> None:
    """Compile a DGS file into parquet tables."""
    print(f"Compiling DGS file: {dgs}")
    try:
        manifest = compile_dgs(dgs, out)
    except Exception as e:
        # Fail closed, with a single-line reason.
        print(f"FATAL: {e}")
        raise SystemExit(1)

    print(f"{manifest['status']}: Tables generated at {out}")
    print(f"  Settings: {manifest['settings_number']}")
    print(f"  Waveforms: {manifest['valid_packets']}")


if __name__ == "__main__":
    main()
