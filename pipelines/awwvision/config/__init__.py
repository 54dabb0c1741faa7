"""Configuration management for the AwwVision pipeline."""

from .settings import (
    PipelineConfig,
    RedditConfig,
    StorageConfig,
    VisionConfig,
    ServiceBinding,
    parse_vcap_services,
    get_pipeline_config,
)

__all__ = [
    "PipelineConfig",
    "RedditConfig",
    "StorageConfig",
    "VisionConfig",
    "ServiceBinding",
    "parse_vcap_services",
    "get_pipeline_config",
]
