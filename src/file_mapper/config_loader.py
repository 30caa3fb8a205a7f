"""YAML configuration loading and validation.

This module handles loading and saving the project configuration
(.gdocs-sync/config.yaml).
"""

import os
from typing import Any, Dict, List
import yaml

from .errors import ConfigError, FilesystemError
from .models import SyncConfig


class ConfigLoader:
    """Handles configuration file loading, validation, and saving.

    Configuration file structure:
        docs_dir: "./docs"
        document_title: "Documentation"
        image_chunk_size: 20
        diagram_languages: ["mermaid", "plantuml"]
        file_patterns: ["*.md", "*.mdx"]
        exclude_patterns: ["drafts/*"]
    """

    REQUIRED_TOP_LEVEL_FIELDS = {'docs_dir'}

    DEFAULTS = {
        'document_title': 'Documentation',
        'image_chunk_size': 20,
    }

    @classmethod
    def load(cls, config_path: str) -> SyncConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            SyncConfig object with parsed configuration

        Raises:
            FilesystemError: If file cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise FilesystemError(
                config_path,
                'read',
                'Configuration file not found'
            )
        except PermissionError:
            raise FilesystemError(
                config_path,
                'read',
                'Permission denied'
            )
        except OSError as e:
            raise FilesystemError(
                config_path,
                'read',
                str(e)
            )

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Invalid YAML syntax: {str(e)}"
            )

        if config_dict is None:
            raise ConfigError("Configuration file is empty")

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls._parse_config(config_dict)

    @classmethod
    def save(cls, config_path: str, sync_config: SyncConfig) -> None:
        """Save configuration to a YAML file.

        Raises:
            FilesystemError: If file cannot be written
        """
        config_dict = {
            'docs_dir': sync_config.docs_dir,
            'document_title': sync_config.document_title,
            'image_chunk_size': sync_config.image_chunk_size,
            'diagram_languages': list(sync_config.diagram_languages),
            'file_patterns': list(sync_config.file_patterns),
        }
        if sync_config.exclude_patterns:
            config_dict['exclude_patterns'] = list(sync_config.exclude_patterns)

        yaml_str = yaml.safe_dump(
            config_dict,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        config_dir = os.path.dirname(config_path)
        if config_dir:
            try:
                os.makedirs(config_dir, exist_ok=True)
            except OSError as e:
                raise FilesystemError(
                    config_dir,
                    'create_directory',
                    str(e)
                )

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except PermissionError:
            raise FilesystemError(
                config_path,
                'write',
                'Permission denied'
            )
        except OSError as e:
            raise FilesystemError(
                config_path,
                'write',
                str(e)
            )

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> SyncConfig:
        """Parse and validate configuration dictionary.

        Raises:
            ConfigError: If configuration is invalid
        """
        missing_fields = cls.REQUIRED_TOP_LEVEL_FIELDS - set(config_dict.keys())
        if missing_fields:
            raise ConfigError(
                f"Missing required fields: {', '.join(sorted(missing_fields))}"
            )

        docs_dir = config_dict['docs_dir']
        if not isinstance(docs_dir, str) or not docs_dir.strip():
            raise ConfigError("Field 'docs_dir' must be a non-empty string", 'docs_dir')

        defaults = SyncConfig()
        document_title = config_dict.get('document_title', cls.DEFAULTS['document_title'])
        image_chunk_size = config_dict.get('image_chunk_size', cls.DEFAULTS['image_chunk_size'])

        try:
            document_title = str(document_title)
            image_chunk_size = int(image_chunk_size)
        except (ValueError, TypeError) as e:
            raise ConfigError(
                f"Invalid field type for optional field: {str(e)}"
            )

        if not document_title.strip():
            raise ConfigError("Field 'document_title' cannot be empty", 'document_title')

        if image_chunk_size < 1:
            raise ConfigError(
                f"Field 'image_chunk_size' must be at least 1, got {image_chunk_size}",
                'image_chunk_size'
            )

        return SyncConfig(
            docs_dir=docs_dir,
            document_title=document_title,
            image_chunk_size=image_chunk_size,
            diagram_languages=cls._string_list(
                config_dict, 'diagram_languages', defaults.diagram_languages
            ),
            file_patterns=cls._string_list(
                config_dict, 'file_patterns', defaults.file_patterns
            ),
            exclude_patterns=cls._string_list(config_dict, 'exclude_patterns', []),
        )

    @classmethod
    def _string_list(cls, config_dict: Dict[str, Any], name: str,
                     default: List[str]) -> List[str]:
        value = config_dict.get(name)
        if value is None:
            return list(default)
        if not isinstance(value, list):
            raise ConfigError(f"Field '{name}' must be a list", name)
        return [str(item) for item in value]
