"""
Settings for the pre-accounting core.

settings.yaml holds the tunable values: VAT default, classifier margin,
keyword overrides, currency thresholds and rate cache lifetime. Every
component keeps a built-in default, so a key may be left out.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, Optional


class ConfigurationManager:
    """
    Process-wide holder of the loaded settings.

    Attributes:
        config_path (Path): YAML file the settings were read from.

    Example:
        >>> ConfigurationManager().get("classification.tie_margin")
        0.1
        >>> ConfigurationManager().get("currency.rate_cache_ttl_ms")
        21600000
    """

    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Args:
            config_path: Settings file; the bundled settings.yaml when omitted.
                Ignored once the instance is loaded.
        """
        if self._initialized:
            return

        if config_path is None:
            self.config_path = Path(__file__).parent / "settings.yaml"
        else:
            self.config_path = Path(config_path)

        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """
        Read the settings file.

        Raises:
            FileNotFoundError: The settings file is missing.
            yaml.YAMLError: The settings file is not valid YAML.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as f:
            self._config = yaml.safe_load(f) or {}

        self._resolve_paths()

    def _resolve_paths(self) -> None:
        # Output directories are relative to where the CLI runs
        for key, value in (self._config.get('paths') or {}).items():
            if value and not Path(value).is_absolute():
                self._config['paths'][key] = str(Path.cwd() / value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dotted key such as "currency.provider.latency_seconds".

        Returns:
            The value, or default when any segment is missing.
        """
        value = self._config
        try:
            for part in key.split('.'):
                value = value[part]
            return value
        except (KeyError, TypeError):
            return default

    def get_all(self) -> Dict[str, Any]:
        return self._config.copy()

    def reload(self) -> None:
        self._load_config()

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded instance so the next call reads settings again."""
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """Shortcut for ``ConfigurationManager().get(key, default)``."""
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config']
