from .loader import load_config, load_config_with_overrides
from .schema import FetchConfig, PipelineConfig, RunConfig

__all__ = [
    "load_config",
    "load_config_with_overrides",
    "FetchConfig",
    "PipelineConfig",
    "RunConfig",
]
