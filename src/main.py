"""
Command-line run of the reconstruction anomaly detector.

Reads a 16-bit trace (or generates a synthetic one), fits the signal model,
reconstructs the trace, flags anomalous samples and writes the TSV
artefacts:

    python -m src.main --trace a02.dat --scale 0.005 --fraction 0.001
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

import numpy as np
from dotenv import load_dotenv

from src.anomaly import AnomalyDetector, DetectionReport, create_scorer
from src.core.config import Config, config
from src.core.exceptions import DiagnosticOutputError
from src.core.logging_config import setup_logging
from src.data.readers import read_int16_trace
from src.data.synthetic import sine_with_spikes
from src.data.writers import write_anomalies, write_trace
from src.reconstruction.models import create_model

logger = logging.getLogger("src.main")


def _write_diagnostics(
    detector: AnomalyDetector,
    trace: np.ndarray,
    report: DetectionReport,
    settings: Config,
) -> None:
    out = settings.output
    dump_codebook = getattr(detector.model, "dump_codebook", None)
    if dump_codebook is not None:
        try:
            dump_codebook(out.output_dir / out.dictionary_file, float_format=out.float_format)
        except DiagnosticOutputError as e:
            logger.error(f"Dictionary dump skipped: {e}")

    indices = report.cluster_indices
    if indices is None:
        indices = np.full(len(report.reconstructed), -1)
    try:
        write_trace(
            trace[: len(report.reconstructed)],
            report.reconstructed,
            indices,
            out.output_dir / out.trace_file,
            float_format=out.float_format,
        )
    except DiagnosticOutputError as e:
        logger.error(f"Trace dump skipped: {e}")


def run(
    trace_path: Optional[Path] = None,
    scale: float = 1.0 / 200,
    anomaly_fraction: Optional[float] = None,
    compression: Optional[float] = None,
    strategy: Optional[str] = None,
    policy: str = "quantile_fraction",
    settings: Optional[Config] = None,
) -> DetectionReport:
    """
    Read -> fit -> reconstruct -> score -> emit.

    The model is fitted on the same trace it scores. Anomalies are written
    to ``anomalies_file`` under the configured output directory; the
    dictionary and trace dumps are optional diagnostics.
    """
    settings = settings or config

    if trace_path is not None:
        trace = read_int16_trace(trace_path, scale=scale)
    else:
        logger.info("No trace given; using a synthetic sine wave with spikes")
        trace, _ = sine_with_spikes()

    detector = AnomalyDetector(
        model=create_model(strategy, settings=settings),
        scorer=create_scorer(policy, settings=settings),
        settings=settings,
    )
    detector.fit(trace)
    report = detector.detect_anomalies(trace, anomaly_fraction, compression)

    if settings.output.write_diagnostics:
        _write_diagnostics(detector, trace, report, settings)
    write_anomalies(
        report.anomalies,
        settings.output.output_dir / settings.output.anomalies_file,
        float_format=settings.output.float_format,
    )

    logger.info(
        f"Flagged {len(report.anomalies)} of {report.scoring.scored_samples} samples "
        f"(threshold {report.threshold:.4f})"
    )
    return report


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Reconstruction-based trace anomaly detection")
    parser.add_argument("--trace", type=Path, default=None, help="16-bit big-endian trace file")
    parser.add_argument("--scale", type=float, default=1.0 / 200, help="Sample scale factor")
    parser.add_argument("--fraction", type=float, default=None, help="Fraction of samples to flag")
    parser.add_argument("--compression", type=float, default=None, help="t-digest compression")
    parser.add_argument(
        "--strategy",
        choices=["windowed", "identity", "lowpass"],
        default=None,
        help="Signal model",
    )
    parser.add_argument(
        "--policy",
        choices=["quantile_fraction", "two_sided_quantile"],
        default="quantile_fraction",
        help="Threshold policy",
    )
    args = parser.parse_args(argv)

    setup_logging()
    run(
        trace_path=args.trace,
        scale=args.scale,
        anomaly_fraction=args.fraction,
        compression=args.compression,
        strategy=args.strategy,
        policy=args.policy,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
