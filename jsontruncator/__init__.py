"""Serialize arbitrary values to JSON text that never exceeds a byte budget."""

from .config import DEFAULT_CONFIG, LoggingConfig, Settings, TruncationConfig, build_config, decay, load_settings
from .encoder import FormatFlags, encode, to_value
from .errors import ConfigurationError, DepthExceededError, EncodingError, TruncationError
from .json_helpers import to_bounded_json
from .shrinker import shrink
from .truncator import Report, report, stringify
from .values import Bool, Mapping, Null, Number, Sequence, String, Value

__all__ = [
    "DEFAULT_CONFIG",
    "Bool",
    "ConfigurationError",
    "DepthExceededError",
    "EncodingError",
    "FormatFlags",
    "LoggingConfig",
    "Mapping",
    "Null",
    "Number",
    "Report",
    "Sequence",
    "Settings",
    "String",
    "TruncationConfig",
    "TruncationError",
    "Value",
    "build_config",
    "decay",
    "encode",
    "load_settings",
    "report",
    "shrink",
    "stringify",
    "to_bounded_json",
    "to_value",
]
