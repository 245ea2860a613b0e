from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


@dataclass
class Settings:
    apify_token: str = ""
    apify_actor_id: str = ""
    apify_use_actor: bool = True
    port: int = 3000
    mapping_file: Path = Path("mapping.xlsx")
    metafields_mapping_file: Path = Path("dataset_mobile-de-scraper_mapped_metafields.xlsx")
    poll_interval: float = 5.0
    run_timeout: float = 900.0


def load_env(env_path: Optional[str] = None) -> None:
    """Load KEY=VALUE pairs from a .env file without overriding the environment."""
    if env_path and not Path(env_path).exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, "") or default)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, "") or default)
    except ValueError:
        return default


def get_settings() -> Settings:
    defaults = Settings()
    metafields_file = (
        os.getenv("METAFIELDS_MAPPING_FILE")
        or os.getenv("SHOPIFY_METAFIELDS_FILE")
        or str(defaults.metafields_mapping_file)
    )
    return Settings(
        apify_token=(os.getenv("APIFY_TOKEN") or os.getenv("APIFY_API_TOKEN") or "").strip(),
        apify_actor_id=os.getenv("APIFY_ACTOR_ID", "").strip(),
        apify_use_actor=os.getenv("APIFY_USE_ACTOR", "true").strip().lower() != "false",
        port=_env_int("PORT", defaults.port),
        mapping_file=Path(os.getenv("SHOPIFY_MAPPING_FILE") or defaults.mapping_file),
        metafields_mapping_file=Path(metafields_file),
        poll_interval=_env_float("APIFY_POLL_INTERVAL", defaults.poll_interval),
        run_timeout=_env_float("APIFY_RUN_TIMEOUT", defaults.run_timeout),
    )
