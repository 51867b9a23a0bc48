#!/usr/bin/env python3
"""
Configuration Management Module for the CashToken Validator CLI

Handles hierarchical configuration loading: built-in defaults, a YAML or JSON
configuration file, then environment variables. The protocol section becomes
the ProtocolConfig handed to the validation engine.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from ledger.config import ProtocolConfig
from ledger.exceptions import ConfigurationError
from validator.error_reporting import ErrorReportingLevel

# Environment variable prefix
ENV_PREFIX = 'CASHTOKENS_'

# Environment variables and the configuration keys they override
ENV_VARIABLES: Dict[str, Tuple[str, str]] = {
    'CASHTOKENS_MAX_COMMITMENT_LENGTH': ('protocol', 'max_commitment_length'),
    'CASHTOKENS_MAX_AMOUNT': ('protocol', 'max_amount'),
    'CASHTOKENS_DUST_THRESHOLD': ('protocol', 'dust_threshold'),
    'CASHTOKENS_REPORTING_LEVEL': ('reporting', 'level'),
}

# Default configuration values
DEFAULT_CONFIG: Dict[str, Any] = {
    'protocol': ProtocolConfig().model_dump(),
    'reporting': {
        'level': 'standard',  # minimal, standard, detailed
    },
}


def config_search_paths() -> List[Path]:
    """Configuration file locations in order of precedence (highest first)."""
    return [
        Path.cwd() / '.cashtokens.yml',
        Path.cwd() / '.cashtokens.json',
        Path.home() / '.cashtokens' / 'config.yml',
        Path.home() / '.cashtokens' / 'config.json',
    ]


class ConfigurationManager:
    """Manages hierarchical configuration with environment variable support."""
    
    def __init__(self, config_file: Optional[str] = None,
                 environ: Optional[Mapping[str, str]] = None):
        """
        Initialize configuration manager.
        
        Args:
            config_file: Explicit configuration file path
            environ: Environment to read overrides from (os.environ if None)
        """
        self.logger = logging.getLogger('cashtokens-cli.config')
        self.config_file = config_file
        self.environ = os.environ if environ is None else environ
        self._config_cache: Optional[Dict[str, Any]] = None
        self._config_sources: List[str] = []
    
    def load(self) -> Dict[str, Any]:
        """
        Load configuration from all sources in hierarchical order.
        
        Returns:
            Merged configuration dictionary
            
        Raises:
            ConfigurationError: If a configuration file cannot be read
        """
        if self._config_cache is not None:
            return self._config_cache
        
        configs = [DEFAULT_CONFIG]
        self._config_sources = ["defaults"]
        
        if self.config_file:
            path = Path(self.config_file)
            if not path.exists():
                raise ConfigurationError(f"Config file not found: {path}")
            configs.append(self._load_config_file(path))
            self._config_sources.append(f"file:{path}")
        else:
            for path in config_search_paths():
                if path.exists():
                    configs.append(self._load_config_file(path))
                    self._config_sources.append(f"file:{path}")
                    self.logger.debug(f"Loaded config from {path}")
                    break  # Use first found config file
        
        env_config = self._load_environment_variables()
        if env_config:
            configs.append(env_config)
            self._config_sources.append("environment")
        
        merged = self._deep_merge(*configs)
        self._validate_reporting(merged)
        self._config_cache = merged
        return self._config_cache
    
    def _validate_reporting(self, config: Dict[str, Any]):
        """Reject unknown reporting levels before any command runs."""
        reporting = config.get('reporting')
        if not isinstance(reporting, dict):
            raise ConfigurationError("reporting section must be a mapping")
        
        level = reporting.get('level')
        valid_levels = [member.value for member in ErrorReportingLevel]
        if level not in valid_levels:
            raise ConfigurationError(
                f"Invalid reporting level {level!r}, expected one of {', '.join(valid_levels)}"
            )
    
    def _load_config_file(self, path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML or JSON file."""
        try:
            with open(path, 'r') as f:
                if path.suffix in ['.yml', '.yaml']:
                    data = yaml.safe_load(f)
                elif path.suffix == '.json':
                    data = json.load(f)
                else:
                    raise ConfigurationError(f"Unknown config file format: {path}")
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to load config from {path}: {e}") from e
        
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        return data
    
    def _load_environment_variables(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: Dict[str, Any] = {}
        
        for variable, (section, key) in ENV_VARIABLES.items():
            if variable in self.environ:
                env_config.setdefault(section, {})[key] = self._parse_env_value(self.environ[variable])
        
        return env_config
    
    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value to an integer where possible."""
        try:
            return int(value)
        except ValueError:
            return value
    
    def _deep_merge(self, *dicts: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge multiple dictionaries."""
        result: Dict[str, Any] = {}
        
        for dictionary in dicts:
            for key, value in dictionary.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = self._deep_merge(result[key], value)
                else:
                    result[key] = value
        
        return result
    
    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.
        
        Args:
            key_path: Path such as 'protocol.max_amount'
            default: Value returned when the path is absent
        """
        current: Any = self.load()
        for part in key_path.split('.'):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current
    
    def protocol_config(self) -> ProtocolConfig:
        """
        Build the protocol configuration for the validation engine.
        
        Raises:
            ConfigurationError: If the protocol section is invalid
        """
        section = self.get('protocol', {})
        if not isinstance(section, dict):
            raise ConfigurationError("protocol section must be a mapping")
        return ProtocolConfig.create(**section)
    
    def get_sources(self) -> List[str]:
        """Get the configuration sources applied, lowest precedence first."""
        self.load()
        return list(self._config_sources)
