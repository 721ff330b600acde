"""Configuration for itop."""

from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path

import tomlkit


@dataclass
class KeysConfig:
    """Keyboard bindings, using Textual key names."""

    exit: str = "q"  # ctrl+c always exits as well
    cpu_sort: str = "c"
    memory_sort: str = "m"
    confirm: str = "enter"
    up: list[str] = field(default_factory=lambda: ["up", "k"])
    down: list[str] = field(default_factory=lambda: ["down", "j"])


@dataclass
class LoggingConfig:
    """Log file settings."""

    level: str = "INFO"
    max_bytes: int = 1024 * 1024  # Rotate at 1MB
    backup_count: int = 2


def _dataclass_to_table(obj: object) -> tomlkit.items.Table:
    """Convert a dataclass instance to a tomlkit Table."""
    table = tomlkit.table()
    for f in fields(obj):  # type: ignore[arg-type]
        value = getattr(obj, f.name)
        if is_dataclass(value) and not isinstance(value, type):
            table.add(f.name, _dataclass_to_table(value))
        else:
            table.add(f.name, value)
    return table


def _load_section(section: str, cls, data: dict):
    """Build a section dataclass, using its defaults for missing fields.

    Raises:
        ValueError: If a value does not match the type of its default.
    """
    defaults = cls()
    values = {}
    for f in fields(cls):
        default = getattr(defaults, f.name)
        value = data.get(f.name, default)
        if hasattr(value, "unwrap"):
            value = value.unwrap()

        if isinstance(default, list):
            # A single key may be written without brackets
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
                raise ValueError(
                    f"Invalid {section}.{f.name}: expected a list of strings, got {value!r}"
                )
        elif type(value) is not type(default):
            raise ValueError(
                f"Invalid {section}.{f.name}: expected {type(default).__name__}, got {value!r}"
            )
        values[f.name] = value
    return cls(**values)


@dataclass
class Config:
    """Main configuration container."""

    keys: KeysConfig = field(default_factory=KeysConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def config_dir(self) -> Path:
        """Configuration directory."""
        return Path.home() / ".config" / "itop"

    @property
    def config_path(self) -> Path:
        """Path to config file."""
        return self.config_dir / "config.toml"

    @property
    def state_dir(self) -> Path:
        """State directory for logs."""
        return Path.home() / ".local" / "state" / "itop"

    @property
    def log_path(self) -> Path:
        """Log file path."""
        return self.state_dir / "itop.log"

    def save(self, path: Path | None = None) -> None:
        """Save config to TOML file."""
        path = path or self.config_path
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        for name in ("keys", "logging"):
            doc.add(name, _dataclass_to_table(getattr(self, name)))
            doc.add(tomlkit.nl())

        path.write_text(tomlkit.dumps(doc))

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values."""
        defaults = cls()
        path = path or defaults.config_path
        if not path.exists():
            return defaults

        try:
            with open(path) as f:
                data = tomlkit.load(f)
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        return cls(
            keys=_load_section("keys", KeysConfig, data.get("keys", {})),
            logging=_load_section("logging", LoggingConfig, data.get("logging", {})),
        )
