"""
Configuration loader
"""
import logging
import os
from pathlib import Path

import yaml

from scoreboard.models import Settings
from scoreboard.services.logos import LogoCatalog
from scoreboard.store import BaseStore


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/scoreboard.yaml"


def load_settings(config_path: str = None) -> Settings:
    """
    Load settings from YAML file

    Args:
        config_path: Path to config file (default: $SCOREBOARD_CONFIG or config/scoreboard.yaml)

    Returns:
        Settings object
    """
    path = Path(config_path or os.getenv("SCOREBOARD_CONFIG", DEFAULT_CONFIG_PATH))

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    # YAML turns unquoted 1/0 into ints; flags are always strings
    data["flags"] = {k: str(v) for k, v in (data.get("flags") or {}).items()}

    return Settings(**data)


async def seed_store(store: BaseStore, settings: Settings) -> None:
    """
    Seed flags, stock logos and registration tokens from settings.
    Values already present in the store are left alone.
    """
    for name, value in settings.flags.items():
        await store.set_config(name, value, overwrite=False)

    catalog = LogoCatalog(store, settings.logo_dir, settings.logo_url_prefix)
    created = await catalog.import_all(settings.logos)

    for token in settings.tokens:
        if await store.get_token(token) is None:
            await store.create_token(token)

    logger.info(
        f"Seeded {len(settings.flags)} flags, {created} new logos, {len(settings.tokens)} tokens"
    )
