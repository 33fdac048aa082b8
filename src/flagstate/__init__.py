"""flagstate: feature flag evaluation snapshots."""

from .client import FlagEvaluator, all_flags_state
from .config import FlagsStateSettings, LogSettings, load
from .exceptions import FlagsStateError, FlagsStateErrorCodes
from .logger import configure_logging, get_logger
from .memory import InMemoryFlagEvaluator
from .models import (
    EvaluationContext,
    EvaluationDetail,
    EvaluationErrorKind,
    EvaluationReason,
    EvaluationReasonKind,
    FeatureFlag,
)
from .options import FlagsStateOption, FlagsStateOptions
from .serialization import FLAGS_STATE_KEY, VALID_KEY, dumps, loads, to_json_dict
from .state import FeatureFlagsState, FeatureFlagsStateBuilder, FlagMetadata

__all__ = [
    "EvaluationContext",
    "EvaluationDetail",
    "EvaluationErrorKind",
    "EvaluationReason",
    "EvaluationReasonKind",
    "FeatureFlag",
    "FeatureFlagsState",
    "FeatureFlagsStateBuilder",
    "FlagEvaluator",
    "FlagMetadata",
    "FlagsStateError",
    "FlagsStateErrorCodes",
    "FlagsStateOption",
    "FlagsStateOptions",
    "FlagsStateSettings",
    "FLAGS_STATE_KEY",
    "InMemoryFlagEvaluator",
    "LogSettings",
    "VALID_KEY",
    "all_flags_state",
    "configure_logging",
    "dumps",
    "get_logger",
    "load",
    "loads",
    "to_json_dict",
]
