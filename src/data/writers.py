"""
Tab-separated diagnostic artefacts.

- dictionary: one line per codeword, window values separated by tabs
- trace: original value, reconstructed value, cluster index per sample
- anomalies: value(s), residual, index per flagged sample

Every file is written to a temporary sibling first and renamed into place
only once complete. A failed write removes the temporary file and raises
DiagnosticOutputError, so a partial artefact never sits under the final name.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence, TextIO, Union

import numpy as np
import pandas as pd

from src.core.exceptions import DiagnosticOutputError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _atomic_write(path: PathLike, render: Callable[[TextIO], None]) -> Path:
    target = Path(path)
    tmp_name: Optional[str] = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=".tmp",
            delete=False,
            newline="",
        ) as handle:
            tmp_name = handle.name
            render(handle)
        os.replace(tmp_name, target)
    except (OSError, ValueError) as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise DiagnosticOutputError(f"Could not write {target}: {e}") from e
    logger.debug(f"Wrote {target}")
    return target


def _to_tsv(frame: pd.DataFrame, float_format: str) -> Callable[[TextIO], None]:
    def render(handle: TextIO) -> None:
        frame.to_csv(handle, sep="\t", header=False, index=False, float_format=float_format)

    return render


def write_dictionary(
    codewords: Iterable[Sequence[float]],
    path: PathLike,
    float_format: str = "%.3f",
) -> Path:
    """Dump codewords, one per line."""
    frame = pd.DataFrame(np.vstack([np.asarray(c, dtype=float) for c in codewords]))
    return _atomic_write(path, _to_tsv(frame, float_format))


def write_trace(
    original: Sequence[float],
    reconstructed: Sequence[float],
    cluster_indices: Sequence[int],
    path: PathLike,
    float_format: str = "%.3f",
) -> Path:
    """
    Dump the reconstruction trace.

    Raises:
        DiagnosticOutputError: if the three columns differ in length
    """
    if not (len(original) == len(reconstructed) == len(cluster_indices)):
        raise DiagnosticOutputError(
            f"Trace columns differ in length: {len(original)}, "
            f"{len(reconstructed)}, {len(cluster_indices)}"
        )
    frame = pd.DataFrame(
        {
            "original": np.asarray(original, dtype=float),
            "reconstructed": np.asarray(reconstructed, dtype=float),
            "cluster": np.asarray(cluster_indices, dtype=int),
        }
    )
    return _atomic_write(path, _to_tsv(frame, float_format))


def write_anomalies(anomalies, path: PathLike, float_format: str = "%.3f") -> Path:
    """
    Dump anomaly records as value(s), residual, index.

    Multi-feature values take one column per feature.
    """
    rows = []
    for record in anomalies:
        values = np.atleast_1d(np.asarray(record.value, dtype=float)).tolist()
        rows.append(values + [record.residual, record.index])
    if not rows:
        return _atomic_write(path, lambda handle: None)
    frame = pd.DataFrame(rows)
    frame[frame.columns[-1]] = frame[frame.columns[-1]].astype(int)
    return _atomic_write(path, _to_tsv(frame, float_format))
