import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG_PATH = ".reviewdesk.yml"

DEFAULT_CONFIG: dict = {
    "store": "sqlite",  # "sqlite" | "memory" | "gist"
    "store_path": ".reviewdesk.db",
    "gist_id": None,
    "model": "anthropic",  # provider for title suggestions
    "reviewer_tag": "client",
    "active_window_hours": 24,
    "draft_retention_days": 30,
    "suggestion_count": 3,
}


def resolve_config_path(config_path: Optional[str] = None) -> str:
    """Explicit path, then $REVIEWDESK_CONFIG, then .reviewdesk.yml in the cwd."""
    return config_path or os.environ.get("REVIEWDESK_CONFIG") or DEFAULT_CONFIG_PATH


def load_config(config_path: str = DEFAULT_CONFIG_PATH, cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .reviewdesk.yml (or the given path)
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"{config_path} must contain a YAML mapping, got {type(file_config).__name__}")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")

    return config
