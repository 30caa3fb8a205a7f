"""InitCommand for configuration initialization.

This module implements the --init command that writes the project
configuration (.gdocs-sync/config.yaml) and makes sure the docs directory
exists.
"""

import logging
import os
from typing import Optional

from src.file_mapper.config_loader import ConfigLoader
from src.file_mapper.errors import FilesystemError
from src.file_mapper.models import SyncConfig
from .errors import InitError

logger = logging.getLogger(__name__)


class InitCommand:
    """Handles initialization of sync configuration.

    Example:
        >>> init = InitCommand()
        >>> init.run(docs_dir="./docs", document_title="Team Handbook")
    """

    DEFAULT_CONFIG_PATH = ".gdocs-sync/config.yaml"

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH

    def _check_config_exists(self) -> None:
        """Check if config file already exists.

        Raises:
            InitError: If config file already exists
        """
        if os.path.exists(self.config_path):
            raise InitError(
                f"Configuration file already exists at {self.config_path}\n"
                "Please delete it first if you want to reinitialize."
            )

    def _create_docs_dir(self, docs_dir: str) -> None:
        try:
            os.makedirs(docs_dir, exist_ok=True)
            logger.info(f"Using docs directory: {docs_dir}")
        except OSError as e:
            raise InitError(
                f"Failed to create docs directory {docs_dir}: {str(e)}"
            )

    def run(
        self,
        docs_dir: str,
        document_title: Optional[str] = None,
    ) -> SyncConfig:
        """Write a fresh configuration.

        Args:
            docs_dir: Directory holding the markdown files
            document_title: Title for the Google Doc created on first sync

        Returns:
            The SyncConfig that was saved

        Raises:
            InitError: If initialization fails at any step
        """
        self._check_config_exists()

        docs_dir = os.path.normpath(docs_dir)
        self._create_docs_dir(docs_dir)

        sync_config = SyncConfig(docs_dir=docs_dir)
        if document_title:
            if not document_title.strip():
                raise InitError("Document title cannot be empty")
            sync_config.document_title = document_title.strip()

        try:
            ConfigLoader.save(self.config_path, sync_config)
        except FilesystemError as e:
            raise InitError(f"Failed to save configuration: {str(e)}")

        logger.info(f"Configuration saved to {self.config_path}")
        return sync_config
