"""
Enablement filter.

Each catalog axis (region, instance type, OS, database type, database
engine) is restricted by a configured regular expression. An identifier is
enabled when the whole identifier matches.
"""
import re
from dataclasses import dataclass
from re import Pattern
from typing import Optional

from azure_catalog.config import Settings
from azure_catalog.exceptions import ConfigurationError


def is_enabled(pattern: Optional[Pattern], identifier: str) -> bool:
    """Full-string match; a missing pattern enables everything."""
    return pattern is None or pattern.fullmatch(identifier) is not None


def compile_pattern(setting: str, value: Optional[str], flags: int = 0) -> Optional[Pattern]:
    """
    Compile one configured pattern.

    Raises:
        ConfigurationError: If the expression is invalid
    """
    if value is None:
        return None
    try:
        return re.compile(value, flags)
    except re.error as e:
        raise ConfigurationError(setting, value, str(e)) from e


@dataclass(frozen=True)
class EnablementPatterns:
    """Compiled patterns for every axis."""

    region: Optional[Pattern] = None
    instance_type: Optional[Pattern] = None
    os: Optional[Pattern] = None
    database_type: Optional[Pattern] = None
    database_engine: Optional[Pattern] = None

    @classmethod
    def compile(cls, settings: Settings) -> "EnablementPatterns":
        """
        Compile all axes up front so a bad pattern aborts before any fetch.

        Instance type and OS are matched case-insensitively.
        """
        return cls(
            region=compile_pattern("regions", settings.regions),
            instance_type=compile_pattern("instance_type", settings.instance_type, re.IGNORECASE),
            os=compile_pattern("os", settings.os, re.IGNORECASE),
            database_type=compile_pattern("database_type", settings.database_type),
            database_engine=compile_pattern("database_engine", settings.database_engine),
        )

    def is_enabled_region(self, region: str) -> bool:
        return is_enabled(self.region, region)

    def is_enabled_type(self, code: str) -> bool:
        return is_enabled(self.instance_type, code)

    def is_enabled_os(self, os: str) -> bool:
        return is_enabled(self.os, os)

    def is_enabled_database_type(self, code: str) -> bool:
        return is_enabled(self.database_type, code)

    def is_enabled_engine(self, engine: str) -> bool:
        return is_enabled(self.database_engine, engine)
