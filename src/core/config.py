"""
Application configuration for Trace Sentinel.

Provides environment-aware settings with conservative defaults. Window sizes,
codebook size and detection thresholds are configurable to avoid hard-coded
"magic numbers" in the reconstruction pipeline.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WindowingConfig(BaseModel):
	"""
	Windowing parameters for the dictionary reconstruction.

	Notes:
	- window: samples per window, must be even so it splits into two halves.
	- step: stride between training windows (trade-off between training-set
	  size and clustering cost).
	- samples: upper bound on the number of training windows.
	- norm_floor: windows with a norm at or below this value are treated as silent.
	"""

	window: int = Field(32, ge=4, description="Window length in samples")
	step: int = Field(2, ge=1, description="Stride between training windows")
	samples: int = Field(200000, ge=1, description="Maximum number of training windows")
	norm_floor: float = Field(1e-12, ge=0.0)
	taper: str = Field(
		"sine_squared",
		description="Taper function: 'sine_squared' or 'hann'",
	)

	@field_validator("window")
	@classmethod
	def _window_must_be_even(cls, value: int) -> int:
		if value % 2:
			raise ValueError("window must be even")
		return value


class CodebookConfig(BaseModel):
	"""
	Clustering configuration for the window dictionary.
	"""

	clusters: int = Field(400, ge=1, description="Number of codewords (K)")
	iterations: int = Field(10, ge=1, description="k-means iterations")
	random_state: int = Field(0, description="Seed for centroid initialisation")


class DetectionConfig(BaseModel):
	"""
	Threshold configuration.

	Notes:
	- anomaly_fraction: proportion of scored samples to flag.
	- compression: t-digest compression (higher is more accurate, larger).
	- two_sided_quantile: fixed quantile for the two-sided alternative policy.
	"""

	anomaly_fraction: float = Field(0.01, gt=0.0, lt=1.0)
	compression: float = Field(100.0, gt=0.0)
	two_sided_quantile: float = Field(0.9, gt=0.5, lt=1.0)
	strategy: str = Field(
		"windowed",
		description="Signal model: 'windowed', 'identity' or 'lowpass'",
	)
	lowpass_span: int = Field(5, ge=1)


class OutputConfig(BaseModel):
	"""
	Diagnostic artefacts written by the command-line run.
	"""

	output_dir: Path = Field(Path("output"))
	dictionary_file: str = "dict.tsv"
	trace_file: str = "trace.tsv"
	anomalies_file: str = "anomalies.tsv"
	float_format: str = "%.3f"
	write_diagnostics: bool = True


class Config(BaseSettings):
	"""
	Global configuration with environment overrides.
	"""

	model_config = SettingsConfigDict(
		env_prefix="SENTINEL_",
		env_file=".env",
		env_nested_delimiter="__",
		extra="ignore",
	)

	log_level: str = Field("INFO", description="Default logging level")
	logs_dir: Path = Field(Path("logs"), description="Directory for log files")
	windowing: WindowingConfig = WindowingConfig()
	codebook: CodebookConfig = CodebookConfig()
	detection: DetectionConfig = DetectionConfig()
	output: OutputConfig = OutputConfig()

	def model_post_init(self, __context: object) -> None:
		self.logs_dir.mkdir(parents=True, exist_ok=True)


config = Config()
