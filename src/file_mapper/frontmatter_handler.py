"""YAML front matter parsing for markdown files.

Front matter is metadata only; it never reaches the Google Doc. The title
field (when present) names the document section.
"""

import re
from typing import Any, Dict, Tuple
import yaml

from .errors import FrontmatterError


class FrontmatterHandler:
    """Splits markdown content into front matter and body."""

    # Regex pattern to match YAML frontmatter (between --- delimiters)
    FRONTMATTER_PATTERN = re.compile(
        r'^---\s*\n(.*?)\n---\s*(?:\n|$)',
        re.DOTALL
    )

    # Maximum allowed depth for YAML structures to prevent DoS attacks
    MAX_YAML_DEPTH = 10

    @classmethod
    def _validate_yaml_depth(cls, obj, current_depth: int = 0, max_depth: int = MAX_YAML_DEPTH) -> None:
        """Reject deeply nested YAML structures.

        Raises:
            ValueError: If depth exceeds maximum
        """
        if current_depth > max_depth:
            raise ValueError(f"YAML structure exceeds maximum depth of {max_depth}")

        if isinstance(obj, dict):
            for value in obj.values():
                cls._validate_yaml_depth(value, current_depth + 1, max_depth)
        elif isinstance(obj, list):
            for item in obj:
                cls._validate_yaml_depth(item, current_depth + 1, max_depth)

    @classmethod
    def split(cls, file_path: str, content: str) -> Tuple[Dict[str, Any], str]:
        """Separate front matter from the markdown body.

        Args:
            file_path: Path to the file (for error messages)
            content: Full file content

        Returns:
            Tuple of (frontmatter dict, body); frontmatter is empty when the
            file has none

        Raises:
            FrontmatterError: If front matter is malformed
        """
        match = cls.FRONTMATTER_PATTERN.match(content)
        if not match:
            return {}, content

        body = content[match.end():]
        try:
            frontmatter = yaml.safe_load(match.group(1))
        except yaml.YAMLError as e:
            raise FrontmatterError(
                file_path,
                f"Invalid YAML syntax: {str(e)}"
            )

        if frontmatter is None:
            return {}, body

        if not isinstance(frontmatter, dict):
            raise FrontmatterError(
                file_path,
                f"Frontmatter must be a YAML dictionary, got {type(frontmatter).__name__}"
            )

        try:
            cls._validate_yaml_depth(frontmatter)
        except ValueError as e:
            raise FrontmatterError(file_path, str(e))

        return frontmatter, body
