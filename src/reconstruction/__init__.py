"""
Reconstruction module: windowing, the k-means window dictionary and the
signal models that turn a series into its "normal" approximation.

    Series
        ↓
    Tapered windows (windowing.py)
        ↓
    Codebook of unit-norm shapes (codebook.py)
        ↓
    Nearest-codeword substitution + overlap-add (models.py)
        ↓
    Reconstructed series, ready for residual scoring
"""

from .codebook import Codebook, KMeansCodebookBuilder
from .models import (
    IdentityModel,
    LowPassModel,
    SignalModel,
    WindowedClusteringModel,
    create_model,
)
from .taper import hann_taper, make_taper, sine_squared_taper
from .windowing import (
    Window,
    WindowSet,
    normalize,
    normalize_rows,
    overlap_add,
    reconstructed_length,
    reconstruction_offsets,
    slice_windows,
    training_window_count,
)

__all__ = [
    "Codebook",
    "KMeansCodebookBuilder",
    "SignalModel",
    "WindowedClusteringModel",
    "IdentityModel",
    "LowPassModel",
    "create_model",
    "sine_squared_taper",
    "hann_taper",
    "make_taper",
    "Window",
    "WindowSet",
    "slice_windows",
    "training_window_count",
    "normalize",
    "normalize_rows",
    "overlap_add",
    "reconstructed_length",
    "reconstruction_offsets",
]
