"""Configuration management for Gagyebu.

Reads configuration from ~/.config/gagyebu.toml and creates default config if needed.
"""

import os
from pathlib import Path
from dataclasses import dataclass
import tomllib
import tomli_w


@dataclass
class Config:
    """Application configuration."""

    base_dir: Path
    db_data_dir: Path
    db_filename: str
    log_level: str
    log_dir: Path
    export_dir: Path
    seed_default_categories: bool

    @property
    def db_path(self) -> Path:
        """Get the full database path (data_dir/filename)."""
        return self.db_data_dir / self.db_filename

    @classmethod
    def default(cls) -> "Config":
        """Create a Config with default values."""
        home = Path.home()
        base_dir = home / "data" / "gagyebu"
        return cls(
            base_dir=base_dir,
            db_data_dir=base_dir / "db",
            db_filename="gagyebu.db",
            log_level="INFO",
            log_dir=base_dir / "logs",
            export_dir=base_dir / "exports",
            seed_default_categories=True,
        )


def get_config_path() -> Path:
    """Get the path to the config file.

    GAGYEBU_CONFIG, when set, replaces the default ~/.config/gagyebu.toml.
    """
    override = os.environ.get("GAGYEBU_CONFIG")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "gagyebu.toml"


def get_migrations_dir() -> Path:
    """Get the path to the migrations directory.

    This is always relative to the code location, not configurable.
    """
    return Path(__file__).parent / "db" / "migrations"


def load_config(config_path: Path = None) -> Config:
    """Load configuration from file, creating default if it doesn't exist.

    Args:
        config_path: Optional override for the config file location.

    Returns:
        Config object with loaded or default values.
    """
    config_path = config_path or get_config_path()

    # If config doesn't exist, create it with defaults
    if not config_path.exists():
        config = Config.default()
        _write_config(config, config_path)
        return config

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    return _parse_config(data)


def _parse_config(data: dict) -> Config:
    """Build a Config from parsed TOML, filling in defaults for missing values."""
    base_dir = Path(data.get("base_dir", Path.home() / "data" / "gagyebu"))

    db_config = data.get("database", {})
    db_data_dir = Path(db_config.get("data_dir", base_dir / "db"))
    db_filename = db_config.get("filename", "gagyebu.db")

    log_config = data.get("logging", {})
    log_level = str(log_config.get("level", "INFO")).upper()
    log_dir = Path(log_config.get("log_dir", base_dir / "logs"))

    ledger_config = data.get("ledger", {})
    export_dir = Path(ledger_config.get("export_dir", base_dir / "exports"))
    seed_default_categories = ledger_config.get("seed_default_categories", True)

    return Config(
        base_dir=base_dir,
        db_data_dir=db_data_dir,
        db_filename=db_filename,
        log_level=log_level,
        log_dir=log_dir,
        export_dir=export_dir,
        seed_default_categories=seed_default_categories,
    )


def _write_config(config: Config, config_path: Path) -> None:
    """Write config to the config file.

    Args:
        config: Config object to write.
        config_path: Destination file.
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "base_dir": str(config.base_dir),
        "database": {
            "data_dir": str(config.db_data_dir),
            "filename": config.db_filename,
        },
        "logging": {
            "level": config.log_level,
            "log_dir": str(config.log_dir),
        },
        "ledger": {
            "export_dir": str(config.export_dir),
            "seed_default_categories": config.seed_default_categories,
        },
    }

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
