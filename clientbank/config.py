"""Configuration management."""
import os
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from clientbank.codec.constants import DEFAULT_SENDER, EXCHANGE_VERSION

# Load environment variables
load_dotenv()

# Environment variable -> dot-separated config key
ENV_OVERRIDES = {
    'CLIENTBANK_ENCODING': 'exchange.encoding',
    'CLIENTBANK_SENDER': 'exchange.sender',
    'CLIENTBANK_LOG_LEVEL': 'logging.level',
}


class Config:
    """Configuration manager."""

    _instance = None

    def __new__(cls, config_path: Optional[str] = None):
        """Singleton pattern to ensure single config instance."""
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
        return cls._instance

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration."""
        if config_path is None:
            config_path = os.getenv('CONFIG_PATH', 'config.yaml')
        self.config_path = config_path
        self.config = self._load_config()
        self._load_env_vars()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file over the defaults."""
        merged = self._default_config()
        if not os.path.exists(self.config_path):
            return merged

        with open(self.config_path, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f) or {}
        for section, values in loaded.items():
            if isinstance(values, dict) and isinstance(merged.get(section), dict):
                merged[section].update(values)
            else:
                merged[section] = values
        return merged

    def _default_config(self) -> Dict[str, Any]:
        """Return default configuration."""
        return {
            'exchange': {
                'version': EXCHANGE_VERSION,
                'sender': DEFAULT_SENDER,
                'encoding': 'Windows',
            },
            'logging': {
                'level': 'INFO',
            },
            'output': {
                'output_directory': 'output',
            },
        }

    def _load_env_vars(self):
        """Apply CLIENTBANK_* environment overrides."""
        for env_key, key_path in ENV_OVERRIDES.items():
            value = os.getenv(env_key)
            if value:
                self.set(key_path, value)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value by dot-separated path."""
        keys = key_path.split('.')
        value = self.config
        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
                if value is None:
                    return default
            else:
                return default
        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value by dot-separated path."""
        keys = key_path.split('.')
        node = self.config
        for key in keys[:-1]:
            node = node.setdefault(key, {})
        node[keys[-1]] = value

    @property
    def exchange_version(self) -> str:
        return self.get('exchange.version', EXCHANGE_VERSION)

    @property
    def sender(self) -> str:
        return self.get('exchange.sender', DEFAULT_SENDER)

    @property
    def encoding(self) -> str:
        """Encoding literal used for new exports."""
        return self.get('exchange.encoding', 'Windows')

    @property
    def log_level(self) -> str:
        return str(self.get('logging.level', 'INFO')).upper()

    @property
    def output_directory(self) -> str:
        """Get output directory."""
        return self.get('output.output_directory', 'output')


# Global config instance
config = Config()
