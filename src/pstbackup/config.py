"""Configuration via a YAML file."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .stores import PLACEHOLDER_STORE

CONFIG_ENV = "PSTBACKUP_CONFIG"
GLOBAL_CONFIG_DIR = Path.home() / ".config" / "pstbackup"
CONFIG_FILE = "config.yaml"
DEFAULT_PREFIX = "Backup_"


@dataclass
class BackupConfig:
    """Defaults for backup runs; command-line options override them."""
    output_dir: Path = field(default_factory=Path.cwd)
    prefix: str = DEFAULT_PREFIX
    exclude: list[str] = field(default_factory=lambda: [PLACEHOLDER_STORE])
    keep_going: bool = False


def get_config_path() -> Path:
    """Get path to config.yaml ($PSTBACKUP_CONFIG, else the global config dir)."""
    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return GLOBAL_CONFIG_DIR / CONFIG_FILE


def load_config(path: Path | None = None) -> BackupConfig:
    """Load config, falling back to defaults for a missing file or keys."""
    config_path = path or get_config_path()
    if not config_path.exists():
        return BackupConfig()

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    config = BackupConfig()
    if data.get("output_dir"):
        config.output_dir = Path(data["output_dir"]).expanduser()
    if "prefix" in data:
        config.prefix = str(data["prefix"] or "")
    if "exclude" in data:
        config.exclude = [str(name) for name in data["exclude"] or []]
    if "keep_going" in data:
        config.keep_going = bool(data["keep_going"])
    return config


def save_config(config: BackupConfig, path: Path | None = None) -> Path:
    """Save config to config.yaml. Returns the path written."""
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "output_dir": str(config.output_dir),
        "prefix": config.prefix,
        "exclude": list(config.exclude),
        "keep_going": config.keep_going,
    }
    with open(config_path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    return config_path
