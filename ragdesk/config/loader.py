"""YAML configuration loader with environment variable overrides.

Layers, later overriding earlier:

  1. ``config/config.yaml`` -- static defaults checked into the repo
  2. ``.env`` file          -- local developer overrides
  3. Environment variables

``load_config()`` reads the YAML file first, then deep-merges the
environment-derived values from :class:`Settings` on top.
"""

from pathlib import Path

import yaml

from ragdesk.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Pre-built settings; a fresh ``Settings()`` is read when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "ollama": {
            "base_url": settings.ollama_base_url,
            "chat_model": settings.chat_model,
            "embedding_model": settings.embedding_model,
        },
        "retrieval": {
            "top_k": settings.rag_top_k,
            "min_similarity": settings.rag_min_similarity,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
