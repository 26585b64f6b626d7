"""
Sample files - build and locate the bundled sample datasets.

The package ships the text samples (CSV, JSONL). Binary samples (Parquet,
Arrow, Excel) are written on demand to the user samples directory, or ahead
of time with the `lakedrop-build-samples` command.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd
import pyarrow as pa

from ..constants import SAMPLE_FILES, app_config_dir
from ..core.errors import SampleResolutionError

logger = logging.getLogger(__name__)

PACKAGED_SAMPLES_DIR = Path(__file__).resolve().parent.parent / "samples"


def sample_frame() -> pd.DataFrame:
    """The 5-row frame every sample file contains."""
    return pd.DataFrame({
        "id": [1, 2, 3, 4, 5],
        "name": ["alpha", "bravo", "charlie", "delta", "echo"],
        "score": [98.5, 76.2, 88.0, 91.4, 69.0],
        "active": [True, False, True, True, False],
        "group": ["A", "B", "A", "B", "C"],
    })


def _write_arrow(df: pd.DataFrame, path: Path):
    table = pa.Table.from_pandas(df, preserve_index=False)
    with pa.OSFile(str(path), 'wb') as sink:
        with pa.ipc.new_file(sink, table.schema) as writer:
            writer.write_table(table)


WRITERS = {
    "sample.csv": lambda df, path: df.to_csv(path, index=False),
    "sample.jsonl": lambda df, path: df.to_json(path, orient="records", lines=True),
    "sample.parquet": lambda df, path: df.to_parquet(path, index=False, engine="pyarrow"),
    "sample.arrow": _write_arrow,
    "sample.xlsx": lambda df, path: df.to_excel(path, index=False, engine="openpyxl"),
}


def build_samples(output_dir: Path, names: Optional[Sequence[str]] = None) -> List[Path]:
    """
    Write sample files.

    Args:
        output_dir: Target directory (created if missing)
        names: Sample file names to write (default: all)

    Returns:
        Paths written
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    df = sample_frame()

    written = []
    for name in names or WRITERS:
        writer = WRITERS.get(name)
        if writer is None:
            raise SampleResolutionError(f"Unknown sample: {name}")
        path = output_dir / name
        writer(df, path)
        written.append(path)
        logger.info(f"Wrote sample {path}")
    return written


class SampleLibrary:
    """
    Locates sample files by name.

    Search order: packaged samples, then the user samples directory. Known
    samples missing from both are generated into the user directory.

    Args:
        search_dirs: Directories to search (default: packaged + user)
        build_dir: Where missing samples are generated (default: user samples dir)
    """

    def __init__(self, search_dirs: Optional[Sequence[Path]] = None, build_dir: Optional[Path] = None):
        self._build_dir = Path(build_dir) if build_dir is not None else app_config_dir() / "samples"
        if search_dirs is None:
            search_dirs = [PACKAGED_SAMPLES_DIR, self._build_dir]
        self._search_dirs = [Path(d) for d in search_dirs]

    @property
    def build_dir(self) -> Path:
        return self._build_dir

    @staticmethod
    def file_name(name: str) -> str:
        """Accept either a picker label ("Parquet") or a file name ("sample.parquet")."""
        return SAMPLE_FILES.get(name, name)

    def resolve(self, name: str) -> Path:
        """
        Return the on-disk path of a sample.

        Raises:
            SampleResolutionError: Unknown sample name
        """
        file_name = self.file_name(name)
        # Names are plain file names, never paths
        if Path(file_name).name != file_name:
            raise SampleResolutionError("Sample file not found")

        for directory in self._search_dirs:
            candidate = directory / file_name
            if candidate.is_file():
                return candidate

        if file_name not in WRITERS:
            raise SampleResolutionError("Sample file not found")

        logger.info(f"Sample {file_name} not found, generating it in {self._build_dir}")
        try:
            return build_samples(self._build_dir, [file_name])[0]
        except (OSError, ValueError, ImportError) as e:
            raise SampleResolutionError(f"Could not generate {file_name}: {e}") from e


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command line entry point: write every sample file."""
    parser = argparse.ArgumentParser(
        prog="lakedrop-build-samples",
        description="Write the LakeDrop sample files (CSV, JSONL, Parquet, Arrow, Excel).",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=app_config_dir() / "samples",
        help="Output directory (default: %(default)s)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s - %(message)s")
    paths = build_samples(args.output)
    print(f"Samples written to {args.output} ({len(paths)} files)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
