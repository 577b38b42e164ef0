"""
Configuration settings for the diff engine.

This module provides centralized configuration for the highlighting and
correlation parameters that can be adjusted based on the specific use case
or environment.
"""

import os

# Line correlation thresholds
POSITION_MATCH_THRESHOLD = 0.5    # Average similarity needed to accept a position-wise pairing
GREEDY_MATCH_THRESHOLD = 0.4      # Minimum similarity for a greedy removed/added pairing

# Character diff settings
MAX_CHAR_DIFF_BYTES = 10000       # Combined UTF-8 size above which intra-line highlighting is skipped

# Environment variable names for configuration overrides
ENV_PREFIX = "GDIFF_DIFF_"
ENV_POSITION_THRESHOLD = f"{ENV_PREFIX}POSITION_THRESHOLD"
ENV_MATCH_THRESHOLD = f"{ENV_PREFIX}MATCH_THRESHOLD"
ENV_MAX_CHAR_DIFF_BYTES = f"{ENV_PREFIX}MAX_CHAR_DIFF_BYTES"


def get_config_value(env_var: str, default_value):
    """
    Get a configuration value from environment variable or use default.

    Args:
        env_var: The environment variable name
        default_value: The default value to use if env var is not set

    Returns:
        The configuration value
    """
    value = os.environ.get(env_var)
    if value is None:
        return default_value

    # Try to convert to the same type as default_value
    try:
        if isinstance(default_value, bool):
            return value.lower() in ('true', 'yes', '1', 'y')
        elif isinstance(default_value, int):
            return int(value)
        elif isinstance(default_value, float):
            return float(value)
        else:
            return value
    except (ValueError, TypeError):
        return default_value


def get_position_threshold() -> float:
    """Get the average similarity a same-length run needs for position-wise pairing."""
    return get_config_value(ENV_POSITION_THRESHOLD, POSITION_MATCH_THRESHOLD)


def get_match_threshold() -> float:
    """Get the minimum similarity for a greedy line pairing."""
    return get_config_value(ENV_MATCH_THRESHOLD, GREEDY_MATCH_THRESHOLD)


def get_max_char_diff_bytes() -> int:
    """Get the combined byte size above which character diffs are skipped."""
    return get_config_value(ENV_MAX_CHAR_DIFF_BYTES, MAX_CHAR_DIFF_BYTES)
