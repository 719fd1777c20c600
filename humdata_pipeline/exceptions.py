"""Exception types raised by the pipeline.

Data problems never raise: they surface as validation issues or
normalization warnings. These exceptions cover configuration and
programming gaps only.
"""


class HumdataPipelineError(Exception):
    """Base class for pipeline errors."""


class ConfigError(HumdataPipelineError):
    """A configuration or schema document could not be loaded."""


class NormalizationError(HumdataPipelineError):
    """Normalization could not be attempted."""


class MalformedPayloadError(NormalizationError):
    """A payload does not have the overall shape its source normalizer expects."""


class UnsupportedSourceError(NormalizationError, ValueError):
    """No normalizer is registered for a (dataset type, source) pair."""

    def __init__(self, dataset_type: str, source: str):
        self.dataset_type = dataset_type
        self.source = source
        super().__init__(f"Unsupported data source: {dataset_type}/{source}")
