import tomllib
import shutil
import sys
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
import os

APP_NAME = "Recallify"


def resolve_data_dir() -> Path:
    """Platform application-data directory; RECALLIFY_HOME wins when set."""
    override = os.getenv("RECALLIFY_HOME")
    if override:
        return Path(override).expanduser()
    if sys.platform == "win32":
        base = os.getenv("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
        return Path(base) / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    base = os.getenv("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(base) / APP_NAME


CONFIG_DIR = resolve_data_dir()
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

def load_config() -> Dict[str, Any]:
    """Load config from the data dir config.toml, copy example if missing, load .env overrides."""
    load_dotenv()
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    database_cfg = config.get("database", {})
    config["database"] = {
        "filename": database_cfg.get("filename", "recallify.db"),
        "strict_params": os.getenv(
            "RECALLIFY_STRICT_PARAMS",
            str(database_cfg.get("strict_params", False))
        ).lower() == "true",
    }
    storage_cfg = config.get("storage", {})
    config["storage"] = {
        "pdf_dir": storage_cfg.get("pdf_dir", "pdfs"),
        "backup_dir": storage_cfg.get("backup_dir", "backups"),
        "backup_keep": int(storage_cfg.get("backup_keep", 7)),
    }
    server_cfg = config.get("server", {})
    config["server"] = {
        "host": server_cfg.get("host", "127.0.0.1"),
        "port": int(os.getenv("RECALLIFY_PORT", server_cfg.get("port", 8000))),
    }
    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("RECALLIFY_LOG_LEVEL", logging_cfg.get("level", "INFO")).upper(),
    }
    return config

def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('database', 'strict_params')."""
    config = load_config()
    value = config.get(section, {}).get(key, default)
    return value
