from pathlib import Path
from typing import Literal

from dotenv import dotenv_values
from pydantic_settings import BaseSettings

_ENV_FILE = Path.home() / "env" / ".env.dev"
_env_vars = dotenv_values(str(_ENV_FILE)) if _ENV_FILE.exists() else {}


class Settings(BaseSettings):
    app_name: str = "HON Equipment Inventory"
    debug: bool = False
    database_url: str = "sqlite+aiosqlite:///data/inventory.db"
    data_dir: Path = Path("data")

    # soft-delete retention
    retention_policy: Literal["fixed_window", "weekly_cutoff"] = "fixed_window"
    retention_days: int = 3
    cleanup_weekday: int = 6  # Monday=0 ... Sunday=6
    cleanup_time: str = "23:59"
    cleanup_timezone: str = "UTC"
    purge_chunk_size: int = 100

    # in-process purge trigger; an external cron can call /deleted/cleanup instead
    cleanup_enabled: bool = False
    cleanup_interval_minutes: int = 60
    cron_secret: str = ""

    max_batch_size: int = 100

    model_config = {
        "env_prefix": "INVENTORY_",
        "env_file": ".env",
        "extra": "ignore",
    }

    def model_post_init(self, __context):
        if not self.cron_secret:
            self.cron_secret = _env_vars.get("CRON_SECRET", "") or ""


settings = Settings()
