"""
Integration tests for the fit -> reconstruct -> score pipeline.

Tests end-to-end flow from raw traces to anomaly records and TSV artefacts.
"""

import numpy as np
import pytest

from src.anomaly.detector import AnomalyDetector
from src.data.synthetic import sine_wave, sine_with_spikes
from src.main import main, run
from src.reconstruction.models import WindowedClusteringModel


@pytest.mark.integration
class TestSpikeDetection:
    """Dictionary trained on a clean sine, applied to the same sine with spikes."""

    def test_all_injected_spikes_are_found(self, recorder):
        length = 12000
        clean = sine_wave(length, period=400.0)
        spiky, spikes = sine_with_spikes(
            length=length, period=400.0, n_spikes=20, spike_scale=10.0, seed=7
        )

        model = WindowedClusteringModel(window=32, step=2, clusters=400, iterations=10, hook=recorder)
        detector = AnomalyDetector(model=model, hook=recorder).fit(clean)
        report = detector.detect_anomalies(spiky, anomaly_fraction=0.002, compression=100)

        flagged = set(report.scoring.indices)
        assert set(spikes.tolist()) <= flagged
        assert len(flagged) - len(spikes) <= 8
        assert report.scoring.scored_samples == 11968
        assert report.dropped_samples == 32
        assert recorder.stages == ["window", "cluster", "reconstruct", "score"]

    def test_clean_signal_is_reconstructed_closely(self):
        clean = sine_wave(6000, period=400.0)
        model = WindowedClusteringModel(window=32, step=2, clusters=200, iterations=10, hook=None)
        model.build_model(clean)

        reconstruction = model.reconstruct_signal(clean)

        error = np.abs(reconstruction[16:] - clean[16:len(reconstruction)])
        assert error.max() < 0.15


@pytest.mark.integration
class TestCommandLineRun:
    def _write_trace(self, path, values, scale):
        path.write_bytes(np.round(values / scale).astype(">i2").tobytes())

    def test_run_writes_artefacts(self, tmp_path, test_config):
        trace, _ = sine_with_spikes(length=12000, period=400.0, seed=3)
        trace_path = tmp_path / "a02.dat"
        self._write_trace(trace_path, trace, scale=1.0 / 200)

        report = run(
            trace_path=trace_path,
            scale=1.0 / 200,
            anomaly_fraction=0.01,
            compression=100,
            settings=test_config,
        )

        out = test_config.output.output_dir
        trace_lines = (out / "trace.tsv").read_text().splitlines()
        anomaly_lines = (out / "anomalies.tsv").read_text().splitlines()
        dictionary_lines = (out / "dict.tsv").read_text().splitlines()

        assert len(trace_lines) == report.scoring.scored_samples
        assert len(anomaly_lines) == len(report.anomalies)
        assert len(dictionary_lines) == 64
        assert all(len(line.split("\t")) == 32 for line in dictionary_lines)
        assert abs(len(anomaly_lines) / len(trace_lines) - 0.01) < 0.001

    def test_failed_diagnostic_does_not_abort_run(self, tmp_path, test_config):
        out = test_config.output.output_dir
        (out / "dict.tsv").mkdir(parents=True)

        report = run(anomaly_fraction=0.01, compression=100, settings=test_config)

        assert (out / "anomalies.tsv").exists()
        assert (out / "trace.tsv").exists()
        assert (out / "dict.tsv").is_dir()
        assert not [p for p in out.iterdir() if p.name.endswith(".tmp")]
        assert report.scoring.scored_samples > 0

    def test_identity_strategy_from_cli(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert main(["--strategy", "identity", "--fraction", "0.01"]) == 0
        assert (tmp_path / "output" / "anomalies.tsv").read_text() == ""
