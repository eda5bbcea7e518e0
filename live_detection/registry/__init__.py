"""Detector registry: parses the JSON document describing available detectors"""

from .model_registry import (
    ModelRegistry,
    DetectorConfig,
    CascadeParams,
    NetworkParams,
    load_all,
    list_names,
    find_config_by_name,
    instantiate_by_name,
    parse_config,
    read_entries
)

__all__ = [
    'ModelRegistry',
    'DetectorConfig',
    'CascadeParams',
    'NetworkParams',
    'load_all',
    'list_names',
    'find_config_by_name',
    'instantiate_by_name',
    'parse_config',
    'read_entries'
]
