"""
Custom exception classes for the Nomad admin app.

Remote operation failures never surface as exceptions to the pages (the data
hooks convert them into error messages). These classes cover the failures that
are programming or deployment mistakes: broken configuration and invalid
field configuration documents.
"""

import logging
from typing import Optional, Dict, Any, List
from pathlib import Path

logger = logging.getLogger(__name__)


class AdminError(Exception):
    """
    Base exception for the admin app.

    Attributes:
        message: Error message
        context: Additional context information
        recovery_suggestions: List of suggested recovery actions
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 recovery_suggestions: Optional[List[str]] = None):
        self.message = message
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ConfigurationError(AdminError):
    """
    Raised when a required configuration value is missing or unusable,
    e.g. the backend URL or API key.
    """

    def __init__(self, setting: str, message: Optional[str] = None):
        self.setting = setting

        if message is None:
            message = f"Missing required configuration value: {setting}"

        recovery_suggestions = [
            f"Set '{setting}' in config.yaml",
            "Or export SUPABASE_URL / SUPABASE_KEY in the environment",
            "Restart the application after changing configuration"
        ]

        super().__init__(message, {'setting': setting}, recovery_suggestions)


class FieldConfigError(AdminError):
    """
    Raised when a field configuration document cannot be loaded or
    contains an invalid field definition.
    """

    def __init__(self, source: str, problems: List[str], path: Optional[Path] = None):
        self.source = source
        self.problems = problems
        self.path = path

        message = f"Invalid field configuration '{source}': " + "; ".join(problems)
        context = {
            'source': source,
            'path': str(path) if path else None,
            'problems': problems
        }

        super().__init__(message, context, ["Fix the listed fields in the YAML document"])
