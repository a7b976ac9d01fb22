"""
Configuration Management

Handles loading and managing configuration files for the Intune Role Manager tool.
"""

import logging
import yaml
from pathlib import Path
from typing import Dict, Any, Optional

from .exceptions import ConfigurationError
from .constants import ErrorMessages, FileConstants, GraphConstants, NetworkConstants, RoleConstants
from .utils import validate_delimiter

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages configuration loading and validation"""

    # Configuration schema - defines expected structure and types
    CONFIG_SCHEMA = {
        'graph': {
            'type': dict,
            'required': False,
            'fields': {
                'base_url': {'type': str, 'required': False},
                'api_version': {'type': str, 'required': False,
                                'choices': [str(v) for v in GraphConstants.ApiVersion]},
                'authority': {'type': str, 'required': False},
                'tenant_id': {'type': str, 'required': False},
                'client_id': {'type': str, 'required': False},
                'timeout': {'type': int, 'required': False},
            }
        },
        'role': {
            'type': dict,
            'required': False,
            'fields': {
                'prefix': {'type': str, 'required': False},
                'delimiter': {'type': str, 'required': False},
            }
        },
        'global': {
            'type': dict,
            'required': False,
            'fields': {
                'skip_tls': {'type': bool, 'required': False},
                'debug': {'type': bool, 'required': False},
            }
        },
    }

    DEFAULTS = {
        'graph': {
            'base_url': GraphConstants.DEFAULT_BASE_URL,
            'api_version': GraphConstants.DEFAULT_API_VERSION,
            'authority': GraphConstants.DEFAULT_AUTHORITY,
            'tenant_id': '',
            'client_id': '',
            'timeout': NetworkConstants.DEFAULT_TIMEOUT,
        },
        'role': {
            'prefix': RoleConstants.DEFAULT_PREFIX,
            'delimiter': RoleConstants.DEFAULT_DELIMITER,
        },
        'global': {
            'skip_tls': False,
            'debug': False,
        },
    }

    def __init__(self):
        """Initialize configuration manager"""
        self.config_data = {}
        self.config_file_path = None

    def load_config(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from YAML file

        Args:
            config_path: Path to configuration file

        Returns:
            Dict containing configuration data

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid
        """
        config_file = Path(config_path)

        if not config_file.exists():
            raise ConfigurationError(ErrorMessages.CONFIG_FILE_NOT_FOUND.format(config_path=config_path))

        if not config_file.is_file():
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_file, 'r') as f:
                self.config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file {config_path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Failed to load configuration from {config_path}: {e}")

        self.config_file_path = config_path
        logger.info(f"Successfully loaded configuration from {config_path}")

        self._validate_config()

        return self.config_data

    def _validate_config(self) -> None:
        """
        Validate configuration structure and values

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not isinstance(self.config_data, dict):
            raise ConfigurationError("Configuration must be a dictionary")

        self._validate_against_schema(self.config_data, self.CONFIG_SCHEMA, "config")

        timeout = self.get_value('graph.timeout')
        if timeout is not None and timeout <= 0:
            raise ConfigurationError(f"config.graph.timeout must be positive, got {timeout}")

        delimiter = self.get_value('role.delimiter')
        if delimiter is not None:
            validate_delimiter(delimiter, "config.role.delimiter")

    def _validate_against_schema(self, data: Dict[str, Any], schema: Dict[str, Any], path: str = "") -> None:
        """
        Validate data against schema definition

        Args:
            data: Data to validate
            schema: Schema definition
            path: Current path for error reporting

        Raises:
            ConfigurationError: If data doesn't match schema
        """
        for key, field_schema in schema.items():
            current_path = f"{path}.{key}" if path else key

            if key in data:
                value = data[key]

                # Skip None values for optional fields
                if value is None and not field_schema.get('required', False):
                    continue

                expected_type = field_schema['type']
                # bool is an int subclass; reject it where an int is expected
                if not isinstance(value, expected_type) or (expected_type is int and isinstance(value, bool)):
                    type_name = expected_type.__name__
                    raise ConfigurationError(f"{current_path} must be a {type_name}")

                if 'choices' in field_schema:
                    if value not in field_schema['choices']:
                        choices_str = ', '.join(f"'{c}'" for c in field_schema['choices'])
                        raise ConfigurationError(f"{current_path} must be one of: {choices_str}")

                if expected_type == dict and 'fields' in field_schema:
                    self._validate_against_schema(value, field_schema['fields'], current_path)

            elif field_schema.get('required', False):
                raise ConfigurationError(f"Required field {current_path} is missing")

    def get_value(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key

        Args:
            key: Configuration key (supports dot notation like 'graph.base_url')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self.config_data

        try:
            for k in keys:
                value = value[k]
        except (KeyError, TypeError):
            return default

        return default if value is None else value

    def get_setting(self, key: str) -> Any:
        """
        Get a configuration value, falling back to the built-in default

        Args:
            key: Dot-notation key present in DEFAULTS (e.g. 'role.prefix')

        Returns:
            Configured value, or the built-in default when unset or empty
        """
        section, _, name = key.partition('.')
        default = self.DEFAULTS.get(section, {}).get(name)
        value = self.get_value(key)
        if value is None or value == '':
            return default
        return value

    def _dict_to_yaml_with_comments(self, data: Dict[str, Any], indent: int = 0) -> str:
        """
        Convert dictionary to YAML string preserving comments

        Keys starting with '#' become comment lines, keys starting with a
        blank become empty lines.

        Args:
            data: Dictionary to convert
            indent: Current indentation level

        Returns:
            str: YAML string with comments
        """
        yaml_lines = []
        indent_str = "  " * indent

        for key, value in data.items():
            if key.startswith("#"):
                yaml_lines.append(f"{indent_str}{key}")
            elif not key.strip():
                yaml_lines.append("")
            elif isinstance(value, dict):
                yaml_lines.append(f"{indent_str}{key}:")
                yaml_lines.append(self._dict_to_yaml_with_comments(value, indent + 1))
            elif isinstance(value, bool):
                yaml_lines.append(f"{indent_str}{key}: {str(value).lower()}")
            elif isinstance(value, str):
                yaml_lines.append(f'{indent_str}{key}: "{value}"')
            else:
                yaml_lines.append(f"{indent_str}{key}: {value}")

        return "\n".join(yaml_lines)

    def get_config_template_content(self) -> str:
        """
        Generate configuration template content as string without file I/O

        Returns:
            str: YAML configuration template content
        """
        template = {
            "# Intune Role Manager Configuration File": None,
            "# Secrets are never read from this file; set AZURE_CLIENT_SECRET or GRAPH_ACCESS_TOKEN": None,
            " ": None,
            "graph": dict(self.DEFAULTS['graph']),
            "  ": None,
            "role": dict(self.DEFAULTS['role']),
            "   ": None,
            "global": dict(self.DEFAULTS['global']),
        }

        return self._dict_to_yaml_with_comments(template) + "\n"

    def generate_config_template(self, output_dir: Optional[str] = None) -> str:
        """
        Generate configuration template file

        Args:
            output_dir: Directory to save template (optional)

        Returns:
            str: Path to generated template file

        Raises:
            ConfigurationError: If template generation fails
        """
        yaml_content = self.get_config_template_content()

        if output_dir:
            output_path = Path(output_dir)
            config_file = output_path / FileConstants.DEFAULT_CONFIG_FILE
        else:
            config_file = Path(FileConstants.DEFAULT_CONFIG_FILE)

        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(config_file, 'w') as f:
                f.write(yaml_content)
        except OSError as e:
            raise ConfigurationError(f"Failed to generate configuration template: {e}")

        logger.info(f"Configuration template generated: {config_file}")
        return str(config_file)
