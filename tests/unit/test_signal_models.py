"""
Unit tests for signal models and the overlap-add reconstruction.
"""

import numpy as np
import pytest

from src.core.config import Config
from src.core.exceptions import ConfigurationError, DataValidationError, ModelNotFittedError
from src.reconstruction.codebook import Codebook
from src.reconstruction.models import (
    IdentityModel,
    LowPassModel,
    SignalModel,
    WindowedClusteringModel,
    create_model,
)


def _taper_codebook_model(taper_name: str) -> WindowedClusteringModel:
    model = WindowedClusteringModel(window=32, taper_name=taper_name, hook=None)
    model.codebook = Codebook.from_centroids(model.taper / np.linalg.norm(model.taper))
    return model


class TestWindowedClusteringModel:
    def test_reconstruct_before_fit_raises(self):
        model = WindowedClusteringModel(hook=None)
        with pytest.raises(ModelNotFittedError):
            model.reconstruct_signal(np.ones(200))

    def test_fit_builds_codebook_and_reports_stages(self, small_model, slow_sine, recorder):
        small_model.build_model(slow_sine)

        assert small_model.is_fitted
        assert len(small_model.codebook) == 32
        assert small_model.codebook.window == 32
        assert recorder.stages == ["window", "cluster"]
        assert recorder.last("window").details["windows"] == (4000 - 32) // 4

    def test_codewords_have_unit_norm_scale(self, small_model, slow_sine):
        small_model.build_model(slow_sine)
        norms = np.linalg.norm(small_model.codebook.centroids, axis=1)
        assert np.all(norms <= 1.0 + 1e-9)
        assert np.all(norms > 0.8)

    @pytest.mark.parametrize("n", [1000, 1001, 1015, 1016, 2500])
    def test_reconstructed_length(self, small_model, slow_sine, n):
        small_model.build_model(slow_sine)
        signal = np.resize(slow_sine, n)

        reconstruction = small_model.reconstruct_signal(signal)

        assert len(reconstruction) == (n // 16) * 16 - 32
        assert len(reconstruction) == small_model.reconstructed_length(n)

    def test_reconstruction_tracks_smooth_signal(self, small_model, slow_sine):
        small_model.build_model(slow_sine)
        reconstruction = small_model.reconstruct_signal(slow_sine)

        # The first half-window only has one contributing codeword
        error = np.abs(reconstruction[16:] - slow_sine[16:len(reconstruction)])
        assert error.max() < 0.2

    def test_reconstruct_with_indices_aligns_per_sample(self, small_model, slow_sine):
        small_model.build_model(slow_sine)
        reconstruction, indices = small_model.reconstruct_with_indices(slow_sine[:500])

        assert len(indices) == len(reconstruction)
        assert np.all(indices[:16] == indices[0])
        assert indices.max() < len(small_model.codebook)

    def test_reconstructs_series_of_different_length(self, small_model, slow_sine):
        small_model.build_model(slow_sine)
        assert len(small_model.reconstruct_signal(slow_sine[:333])) == 288

    def test_too_short_series_rejected(self, small_model):
        with pytest.raises(DataValidationError):
            small_model.build_model(np.ones(20))

    def test_odd_window_rejected(self):
        with pytest.raises(ConfigurationError):
            WindowedClusteringModel(window=31)

    def test_silent_windows_reconstruct_to_zero(self, small_model, slow_sine):
        small_model.build_model(slow_sine)
        assert np.allclose(small_model.reconstruct_signal(np.zeros(320)), 0.0)


class TestOverlapAddWithTaperCentroid:
    def test_hann_taper_reproduces_constant_without_seams(self):
        model = _taper_codebook_model("hann")
        signal = np.full(320, 2.5)

        reconstruction = model.reconstruct_signal(signal)

        assert len(reconstruction) == 288
        assert np.allclose(reconstruction[:16], 2.5 * model.taper[:16])
        assert np.allclose(reconstruction[16:], 2.5, atol=1e-12)

    def test_sine_squared_taper_blend_is_periodic(self):
        model = _taper_codebook_model("sine_squared")
        signal = np.full(320, 2.0)

        reconstruction = model.reconstruct_signal(signal)

        blend = 2.0 * (model.taper[:16] + model.taper[16:])
        expected = np.concatenate([2.0 * model.taper[:16], np.tile(blend, 17)])
        assert np.allclose(reconstruction, expected, atol=1e-12)
        # No jump at half-window boundaries beyond the taper's own shape
        boundaries = np.arange(32, 288, 16)
        assert np.allclose(reconstruction[boundaries], reconstruction[16], atol=1e-12)


class TestSimpleModels:
    def test_identity(self):
        data = np.array([1.0, 2.0, 3.0])
        model = IdentityModel()
        model.build_model(data)
        assert np.array_equal(model.reconstruct_signal(data), data)
        assert model.reconstructed_length(3) == 3

    def test_lowpass_scalar(self):
        data = np.array([0.0, 0.0, 3.0, 0.0, 0.0])
        smoothed = LowPassModel(span=3).reconstruct_signal(data)
        assert np.allclose(smoothed, [0.0, 1.0, 1.0, 1.0, 0.0])

    def test_lowpass_multi_feature(self):
        data = np.column_stack([np.arange(10.0), np.ones(10)])
        smoothed = LowPassModel(span=3).reconstruct_signal(data)

        assert smoothed.shape == (10, 2)
        assert np.allclose(smoothed[1:-1, 0], data[1:-1, 0])
        assert np.allclose(smoothed[:, 1], 1.0)

    def test_models_satisfy_protocol(self):
        for model in (IdentityModel(), LowPassModel(), WindowedClusteringModel(hook=None)):
            assert isinstance(model, SignalModel)


class TestCreateModel:
    def test_strategies(self, test_config: Config):
        assert isinstance(create_model("identity", settings=test_config), IdentityModel)
        assert isinstance(create_model("lowpass", settings=test_config, span=7), LowPassModel)

        windowed = create_model("windowed", settings=test_config, hook=None)
        assert isinstance(windowed, WindowedClusteringModel)
        assert windowed.clusters == 64
        assert windowed.samples == 20000

    def test_default_strategy_from_config(self, test_config: Config):
        assert isinstance(create_model(settings=test_config, hook=None), WindowedClusteringModel)

    def test_unknown_strategy(self, test_config: Config):
        with pytest.raises(ConfigurationError):
            create_model("wavelet", settings=test_config)
