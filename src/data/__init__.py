"""
Data module: trace input, synthetic traces and TSV artefacts.

    Raw 16-bit trace (readers.py) or synthetic series (synthetic.py)
        ↓
    Signal model + anomaly scoring (src.reconstruction, src.anomaly)
        ↓
    dict.tsv / trace.tsv / anomalies.tsv (writers.py)
"""

from src.data.readers import read_int16_trace
from src.data.synthetic import sine_wave, sine_with_spikes
from src.data.writers import write_anomalies, write_dictionary, write_trace

__all__ = [
    "read_int16_trace",
    "sine_wave",
    "sine_with_spikes",
    "write_dictionary",
    "write_trace",
    "write_anomalies",
]
