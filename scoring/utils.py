"""
Scoring utility functions.
Provides the log normalizer, weight loading and aggregation helpers used by scoring.metrics,
plus EMA smoothing for the headline score.
"""
from types import MappingProxyType
from typing import Dict, Mapping, Optional
import logging
import math
import os

import yaml

logger = logging.getLogger(__name__)

# filename used for weight YAML configuration
WEIGHTS_FILENAME = 'weights.yaml'
WEIGHTS_PATH_ENV = 'IMPACT_WEIGHTS_PATH'

# the six weights must sum to 1.00 so the base score stays within 0..100
DEFAULT_WEIGHTS: Mapping[str, float] = MappingProxyType({
    'commits': 0.12,
    'prWeight': 0.33,
    'reviews': 0.22,
    'issues': 0.10,
    'streak': 0.13,
    'collaboration': 0.10,
})

CAPS: Mapping[str, float] = MappingProxyType({
    'commits': 200,
    'prWeight': 40,
    'reviews': 60,
    'issues': 30,
    'activeDays': 90,
    'repos': 10,
})

WEIGHT_SUM_TOLERANCE = 1e-9

# alpha 0.15 gives a half-life of roughly 4.3 daily updates
DEFAULT_EMA_ALPHA = 0.15
EMA_ALPHA_ENV = 'IMPACT_EMA_ALPHA'


def normalize(x: float, cap: float) -> float:
    """
    Log-scaled normalization: ln(1 + min(x, cap)) / ln(1 + cap).

    Returns 0.0 for x <= 0 and exactly 1.0 once x reaches cap.
    """
    if x <= 0:
        return 0.0
    clamped = min(x, cap)
    return math.log(1 + clamped) / math.log(1 + cap)


def linear_ratio(x: float, cap: float) -> float:
    """Plain min(x, cap) / cap, floored at 0."""
    if x <= 0:
        return 0.0
    return min(x, cap) / cap


def round_half_up(value: float) -> int:
    """Round .5 up (toward +inf); Python's round() would send 42.5 to 42."""
    return int(math.floor(value + 0.5))


def clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, value))


def _default_weights_path() -> str:
    return os.getenv(WEIGHTS_PATH_ENV) or os.path.join(os.path.dirname(os.path.dirname(__file__)), 'config', WEIGHTS_FILENAME)


def validate_weights(weights: Mapping[str, float]) -> Mapping[str, float]:
    """Raise ValueError unless weights name exactly the six signals, are non-negative and sum to 1.00. Returns weights unchanged."""
    missing = set(DEFAULT_WEIGHTS) - set(weights)
    unknown = set(weights) - set(DEFAULT_WEIGHTS)
    if missing or unknown:
        raise ValueError(f"Weights must name exactly {sorted(DEFAULT_WEIGHTS)}; missing {sorted(missing)}, unknown {sorted(unknown)}")
    negative = sorted(k for k, w in weights.items() if float(w) < 0)
    if negative:
        raise ValueError(f"Weights must be non-negative, got negative values for {negative}")
    total = sum(float(w) for w in weights.values())
    if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
        raise ValueError(f"Weights must sum to 1.00, got {total:.6f}")
    return weights


def load_weights(path: Optional[str] = None) -> Dict[str, float]:
    """
    Load signal weights from a YAML file, otherwise return defaults.

    The path defaults to $IMPACT_WEIGHTS_PATH or config/weights.yaml. Keys not present in the
    file fall back to the default weight; unknown keys are ignored. The merged mapping must
    still sum to 1.00.
    """
    if not path:
        path = _default_weights_path()
    if not os.path.exists(path):
        logger.debug("weights file %s not found; using default weights", path)
        return dict(DEFAULT_WEIGHTS)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as ex:
        raise ValueError(f"Failed to load weights from {path}: {ex}")
    section = data.get('weights', data) if isinstance(data, dict) else None
    if not isinstance(section, dict):
        raise ValueError(f"Weights file {path} must contain a mapping of signal to weight")
    unknown = set(section.keys()) - set(DEFAULT_WEIGHTS.keys())
    if unknown:
        logger.warning("ignoring unknown weight keys in %s: %s", path, sorted(unknown))
    weights = {k: float(section.get(k, DEFAULT_WEIGHTS[k])) for k in DEFAULT_WEIGHTS.keys()}
    try:
        return validate_weights(weights)
    except ValueError as ex:
        raise ValueError(f"Invalid weights in {path}: {ex}")


def compute_weighted_score(components: Mapping[str, float], weights: Mapping[str, float]) -> float:
    """
    Compute Σ weight * component over the weights mapping.
    Missing components are treated as zero.
    """
    total = 0.0
    for k, w in weights.items():
        val = float(components.get(k, 0.0) or 0.0)
        total += float(w) * val
    return total


def resolve_ema_alpha(alpha: Optional[float] = None) -> float:
    """Return alpha, else $IMPACT_EMA_ALPHA, else the default. Unparsable env values are ignored."""
    if alpha is not None:
        return float(alpha)
    alpha_env = os.getenv(EMA_ALPHA_ENV)
    if alpha_env is None:
        return DEFAULT_EMA_ALPHA
    try:
        return float(alpha_env)
    except ValueError:
        logger.warning("invalid %s=%r; using default %s", EMA_ALPHA_ENV, alpha_env, DEFAULT_EMA_ALPHA)
        return DEFAULT_EMA_ALPHA


def apply_ema_smoothing(current: float, previous: Optional[float] = None, alpha: Optional[float] = None) -> int:
    """
    Exponential moving average of the headline score.

    With no previous smoothed value (first computation) the current score passes through,
    rounded. Otherwise alpha * current + (1 - alpha) * previous, clamped to 0..100.
    """
    a = resolve_ema_alpha(alpha)
    if not 0.0 < a <= 1.0:
        raise ValueError(f"EMA alpha must be in (0, 1], got {a}")
    if previous is None:
        return round_half_up(current)
    smoothed = a * current + (1.0 - a) * previous
    return round_half_up(clamp(smoothed))
