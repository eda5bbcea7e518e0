"""
Declarative detector registry

The registry document is a JSON array of entries such as

    {"name": "Faces", "type": "cascade",
     "paths": {"face": "...xml", "eyes": "...xml", "smile": "...xml"}}

    {"name": "MobileNet", "type": "network",
     "properties": {"framework": "tensorflow", "swapRB": true,
                    "meanValues": [0, 0, 0]},
     "paths": {"inf": "...pbtxt", "model": "...pb", "classes": "...txt"}}

Every function re-reads its source, so edits to the document are picked up
by the next call.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from ..detectors import Detector, DetectorKind, LoadStatus
from ..detectors.network import DEFAULT_INPUT_SIZE

logger = logging.getLogger(__name__)

RegistrySource = Union[str, os.PathLike, List[Dict[str, Any]]]


@dataclass
class CascadeParams:
    face_path: str = ""
    eyes_path: str = ""
    smile_path: str = ""


@dataclass
class NetworkParams:
    framework: str = ""
    inf_graph_path: str = ""
    model_path: str = ""
    classes_path: str = ""
    swap_rb: bool = False
    mean_values: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    input_size: int = DEFAULT_INPUT_SIZE


@dataclass
class DetectorConfig:
    """One parsed registry entry"""
    name: str
    kind: DetectorKind
    params: Union[CascadeParams, NetworkParams] = field(default_factory=CascadeParams)

    def build(self) -> Detector:
        """Create the matching Detector variant (not yet initialized)"""
        p = self.params
        if self.kind is DetectorKind.CASCADE:
            return Detector.create_cascade(p.face_path, p.eyes_path, p.smile_path, name=self.name)
        return Detector.create_network(
            p.framework, p.inf_graph_path, p.model_path, p.classes_path,
            p.swap_rb, p.mean_values, p.input_size, name=self.name
        )


def read_entries(source: RegistrySource) -> List[Dict[str, Any]]:
    """
    Return the raw entries of a registry document

    An unreadable or malformed document is reported and treated as empty.
    """
    if isinstance(source, list):
        documents = source
    else:
        try:
            with open(source, 'r', encoding='utf-8') as f:
                documents = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Could not read detector registry %s: %s", source, e)
            return []

    if not isinstance(documents, list):
        logger.error("Detector registry must be a JSON array, got %s", type(documents).__name__)
        return []
    return [entry for entry in documents if isinstance(entry, dict)]


def _string(obj: Dict[str, Any], key: str) -> str:
    value = obj.get(key)
    return value if isinstance(value, str) else ""


def _number(value, default, cast):
    try:
        return cast(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed numeric value %r in detector registry", value)
        return default


def _flag(value, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    logger.warning("Ignoring non-boolean value %r in detector registry", value)
    return default


def _input_size(value) -> int:
    size = _number(value, DEFAULT_INPUT_SIZE, int)
    if size <= 0:
        logger.warning("Ignoring non-positive inputSize %r in detector registry", value)
        return DEFAULT_INPUT_SIZE
    return size


def _mean_values(raw) -> Tuple[float, float, float]:
    values = [_number(v, 0.0, float) for v in raw] if isinstance(raw, list) else []
    values = (values + [0.0, 0.0, 0.0])[:3]
    return values[0], values[1], values[2]


def parse_config(entry: Dict[str, Any]) -> Tuple[Optional[DetectorConfig], LoadStatus]:
    """Turn one registry entry into a DetectorConfig"""
    name = _string(entry, 'name')
    detector_type = entry.get('type')
    paths = entry.get('paths') if isinstance(entry.get('paths'), dict) else {}

    if detector_type == DetectorKind.CASCADE.value:
        params = CascadeParams(
            face_path=_string(paths, 'face'),
            eyes_path=_string(paths, 'eyes'),
            smile_path=_string(paths, 'smile')
        )
        return DetectorConfig(name, DetectorKind.CASCADE, params), LoadStatus.SUCCESS

    if detector_type == DetectorKind.NETWORK.value:
        props = entry.get('properties') if isinstance(entry.get('properties'), dict) else {}
        params = NetworkParams(
            framework=_string(props, 'framework'),
            inf_graph_path=_string(paths, 'inf'),
            model_path=_string(paths, 'model'),
            classes_path=_string(paths, 'classes'),
            swap_rb=_flag(props.get('swapRB', False), False),
            mean_values=_mean_values(props.get('meanValues')),
            input_size=_input_size(props.get('inputSize', DEFAULT_INPUT_SIZE))
        )
        return DetectorConfig(name, DetectorKind.NETWORK, params), LoadStatus.SUCCESS

    return None, LoadStatus.TYPE_NOT_PROVIDED


def list_names(source: RegistrySource) -> List[str]:
    """Every non-empty entry name, in document order"""
    names = []
    for entry in read_entries(source):
        name = _string(entry, 'name')
        if name:
            names.append(name)
    return names


def find_config_by_name(name: str, source: RegistrySource) -> Optional[Dict[str, Any]]:
    """First entry whose name matches, or None"""
    for entry in read_entries(source):
        if entry.get('name') == name:
            return entry
    return None


def _instantiate(entry: Dict[str, Any]) -> Tuple[Optional[Detector], LoadStatus]:
    config, status = parse_config(entry)
    if config is None:
        return None, status

    detector = config.build()
    status = detector.init()
    if not status.ok:
        detector.release()
        return None, status

    for notice in detector.notices:
        logger.info("%s: %s", config.name, notice)
    return detector, status


def instantiate_by_name(name: str, source: RegistrySource) -> Tuple[Optional[Detector], LoadStatus]:
    """
    Build and initialize the detector registered under name

    Returns:
        (detector, LoadStatus.SUCCESS) or (None, <failure status>)
    """
    entry = find_config_by_name(name, source)
    if entry is None:
        return None, LoadStatus.NAME_NOT_FOUND
    return _instantiate(entry)


def load_all(source: RegistrySource) -> List[Detector]:
    """Initialize every entry, skipping (and logging) the ones that fail"""
    detectors = []
    for index, entry in enumerate(read_entries(source)):
        label = _string(entry, 'name') or f"entry #{index}"
        detector, status = _instantiate(entry)
        if detector is None:
            logger.error("Skipping detector %s: %s", label, status.describe())
            continue
        detectors.append(detector)
    return detectors


class ModelRegistry:
    """
    Convenience handle bound to one registry source

    Holds no parsed state; every call re-reads the source.
    """

    def __init__(self, source: RegistrySource):
        self.source = source

    def load_all(self) -> List[Detector]:
        return load_all(self.source)

    def list_names(self) -> List[str]:
        return list_names(self.source)

    def find_config_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        return find_config_by_name(name, self.source)

    def instantiate_by_name(self, name: str) -> Tuple[Optional[Detector], LoadStatus]:
        return instantiate_by_name(name, self.source)
