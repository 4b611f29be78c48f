"""
Ranking config loader — scorer sampling, call pacing, token pricing.

YAML file with in-memory cache and hardcoded fallback if the file is missing.
"""
import logging
import os

import yaml

logger = logging.getLogger('ranking.config')


_ranking_config = None


def _default_config():
    """Hardcoded fallback if YAML is missing."""
    return {
        'version': 'default',
        'scorer': {
            'temperature': 0.1,
            'max_tokens': 500,
            'response_preview_chars': 100,
        },
        'pacing': {
            'call_delay': 2.0,
            'rate_limit_delay': 5.0,
            'rate_limit_markers': ['rate limit', 'rate_limit', 'ratelimit', '429', 'too many requests'],
        },
        'cost': {
            'per_1k_tokens': 0.0,
        },
    }


def load_ranking_config() -> dict:
    """Load ranking config from YAML, with in-memory cache and hardcoded fallback."""
    global _ranking_config
    if _ranking_config is not None:
        return _ranking_config

    config_path = os.path.join(os.path.dirname(__file__), 'ranking_config.yaml')
    try:
        with open(config_path, 'r') as f:
            _ranking_config = yaml.safe_load(f)
        logger.info("Config loaded from YAML (version=%s)", _ranking_config.get('version', '?'))
    except Exception as e:
        logger.warning("YAML config not found (%s), using defaults", e)
        _ranking_config = _default_config()

    return _ranking_config


def get_scorer_setting(key: str):
    """Scorer sampling setting (temperature, max_tokens, response_preview_chars)."""
    cfg = load_ranking_config()
    return cfg.get('scorer', {}).get(key, _default_config()['scorer'][key])


def get_pacing_setting(key: str):
    """Pacing setting (call_delay, rate_limit_delay, rate_limit_markers)."""
    cfg = load_ranking_config()
    return cfg.get('pacing', {}).get(key, _default_config()['pacing'][key])


def get_cost_per_1k_tokens() -> float:
    cfg = load_ranking_config()
    return float(cfg.get('cost', {}).get('per_1k_tokens', 0.0) or 0.0)


def reset_cache():
    """Reset the in-memory cache (useful for testing)."""
    global _ranking_config
    _ranking_config = None
