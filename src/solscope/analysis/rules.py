"""
Lint rule definitions and configuration.

Rules are plain data: a code, a name, a category, a message template and a
default severity. ``LintConfiguration`` overrides severities per rule or per
category, from code, from a ``solscope.toml`` file or from directives
embedded in the linted source.

Example:
    config = LintConfiguration()
    config.set_level("use-before-define", LintLevel.WARN)
    config.allow("E0102")
"""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from solscope.utils.errors import ConfigurationError, SourceLocation


# =============================================================================
# Lint Rule Configuration
# =============================================================================


class LintLevel(Enum):
    """
    Severity level for lint rules.

    ALLOW: Rule is disabled, no diagnostic produced
    WARN: Rule produces a warning
    DENY: Rule produces an error (non-zero exit status from the CLI)
    """

    ALLOW = "allow"
    WARN = "warn"
    DENY = "deny"


class LintCategory(Enum):
    """
    Categories of lint rules for organization and filtering.
    """

    CORRECTNESS = "correctness"    # Code that does not mean what it says


@dataclass(frozen=True)
class LintRule:
    """
    Definition of a single lint rule.

    Attributes:
        code: Unique rule identifier (e.g., "E0101")
        name: Human-readable rule name (e.g., "use-before-define")
        category: The category this rule belongs to
        message: Template message for the violation (use {} for placeholders)
        level: Default severity level
        suggestion: Optional template for a fix suggestion
    """

    code: str
    name: str
    category: LintCategory
    message: str
    level: LintLevel = LintLevel.DENY
    suggestion: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.code} ({self.name})"


@dataclass
class LintViolation:
    """
    A detected lint violation in the source code.

    Attributes:
        rule: The lint rule that was violated
        location: Where the offending node starts
        message: Formatted message describing the issue
        level: Severity the violation was reported at
        end_location: Where the offending node's last character is
        suggestion: Optional suggestion for fixing the issue
        related_locations: Additional related source locations (e.g., declaration site)
    """

    rule: LintRule
    location: Optional[SourceLocation]
    message: str
    level: LintLevel = LintLevel.DENY
    end_location: Optional[SourceLocation] = None
    suggestion: Optional[str] = None
    related_locations: list[SourceLocation] = field(default_factory=list)

    @property
    def offset(self) -> int:
        return self.location.offset if self.location else -1

    def __str__(self) -> str:
        loc_str = f"{self.location}" if self.location else "<unknown>"
        return f"[{self.rule.code}] {loc_str}: {self.message}"

    def format_full(self) -> str:
        """Format the violation with suggestion and related locations."""
        lines = [str(self)]
        if self.suggestion:
            lines.append(f"  suggestion: {self.suggestion}")
        for related in self.related_locations:
            lines.append(f"  related: {related}")
        return "\n".join(lines)


# =============================================================================
# Lint Rules - Correctness
# =============================================================================

USE_BEFORE_DEFINE = LintRule(
    code="E0101",
    name="use-before-define",
    category=LintCategory.CORRECTNESS,
    message="'{}' is used before its definition (used at offset {}, declared at offset {})",
    suggestion="move the declaration of '{}' above its first use",
)

USE_IN_OWN_INITIALIZER = LintRule(
    code="E0102",
    name="use-in-own-initializer",
    category=LintCategory.CORRECTNESS,
    message="'{}' is used within its own initializer (used at offset {}, declared at offset {})",
    suggestion="'{}' has no value yet while it is being initialized",
)


# =============================================================================
# Rule Registry
# =============================================================================


ALL_RULES: dict[str, LintRule] = {
    USE_BEFORE_DEFINE.code: USE_BEFORE_DEFINE,
    USE_IN_OWN_INITIALIZER.code: USE_IN_OWN_INITIALIZER,
}

# Also index by name
RULES_BY_NAME: dict[str, LintRule] = {
    rule.name: rule for rule in ALL_RULES.values()
}

_LEVELS_BY_NAME: dict[str, LintLevel] = {level.value: level for level in LintLevel}

DIRECTIVE_PATTERN = re.compile(r"//\s*solscope:\s*(allow|warn|deny)\(([a-zA-Z0-9_-]+)\)")


def get_rule(rule_id: str) -> Optional[LintRule]:
    """Get a lint rule by code or by name."""
    return ALL_RULES.get(rule_id) or RULES_BY_NAME.get(rule_id)


def get_rule_by_name(name: str) -> Optional[LintRule]:
    """Get a lint rule by its name."""
    return RULES_BY_NAME.get(name)


def get_rule_by_code(code: str) -> Optional[LintRule]:
    """Get a lint rule by its code."""
    return ALL_RULES.get(code)


def get_rules_by_category(category: LintCategory) -> list[LintRule]:
    """Get all lint rules in a category."""
    return [rule for rule in ALL_RULES.values() if rule.category == category]


# =============================================================================
# Lint Configuration
# =============================================================================


@dataclass
class LintConfiguration:
    """
    Configuration for the linter specifying rule levels.

    Levels are keyed by rule code; setting a level by name stores it under
    the rule's code so both spellings address the same rule.
    """

    rule_levels: dict[str, LintLevel] = field(default_factory=dict)

    def get_level(self, rule: LintRule) -> LintLevel:
        """Get the effective level for a rule."""
        return self.rule_levels.get(rule.code, rule.level)

    def set_level(self, rule_id: str, level: LintLevel) -> None:
        """
        Set the level for a rule by code or name.

        Raises:
            ConfigurationError: If no rule has that code or name
        """
        rule = get_rule(rule_id)
        if rule is None:
            raise ConfigurationError(f"unknown lint rule '{rule_id}'")
        self.rule_levels[rule.code] = level

    def set_level_by_category(self, category: LintCategory, level: LintLevel) -> None:
        """Set the level for all rules in a category."""
        for rule in get_rules_by_category(category):
            self.rule_levels[rule.code] = level

    def allow(self, rule_id: str) -> None:
        """Disable a rule."""
        self.set_level(rule_id, LintLevel.ALLOW)

    def warn(self, rule_id: str) -> None:
        """Set a rule to warning level."""
        self.set_level(rule_id, LintLevel.WARN)

    def deny(self, rule_id: str) -> None:
        """Set a rule to error level."""
        self.set_level(rule_id, LintLevel.DENY)

    def allow_all(self) -> None:
        """Disable all rules."""
        for rule in ALL_RULES.values():
            self.rule_levels[rule.code] = LintLevel.ALLOW

    def warn_all(self) -> None:
        """Set all rules to warning level."""
        for rule in ALL_RULES.values():
            self.rule_levels[rule.code] = LintLevel.WARN

    def deny_all(self) -> None:
        """Set all rules to error level."""
        for rule in ALL_RULES.values():
            self.rule_levels[rule.code] = LintLevel.DENY

    def copy(self) -> "LintConfiguration":
        return LintConfiguration(rule_levels=dict(self.rule_levels))

    @classmethod
    def parse_directive(cls, directive: str) -> tuple[str, str, LintLevel]:
        """
        Parse a lint directive from a source comment.

        Formats:
            // solscope: allow(rule-name)
            // solscope: warn(rule-name)
            // solscope: deny(rule-name)

        Returns:
            Tuple of (action, rule_name, level)

        Raises:
            ConfigurationError: If directive format is invalid
        """
        match = DIRECTIVE_PATTERN.fullmatch(directive.strip())
        if not match:
            raise ConfigurationError(f"Invalid lint directive: {directive}")

        action = match.group(1)
        rule_name = match.group(2)
        return action, rule_name, _LEVELS_BY_NAME[action]

    def with_source_directives(self, source: str) -> "LintConfiguration":
        """
        Return a copy with every directive found in ``source`` applied.

        Directives apply to the whole file. Unknown rule names raise
        ConfigurationError so that typos do not silently disable nothing.
        """
        config = self.copy()
        for match in DIRECTIVE_PATTERN.finditer(source):
            _, rule_name, level = self.parse_directive(match.group(0))
            config.set_level(rule_name, level)
        return config

    @classmethod
    def from_mapping(cls, table: dict) -> "LintConfiguration":
        """
        Build a configuration from a ``[lint]`` table.

        Recognized keys are ``warn_all``/``deny_all``/``allow_all`` booleans and
        rule codes or names mapped to "allow", "warn" or "deny".
        """
        config = cls()
        for switch, apply in (
            ("allow_all", config.allow_all),
            ("warn_all", config.warn_all),
            ("deny_all", config.deny_all),
        ):
            value = table.get(switch, False)
            if not isinstance(value, bool):
                raise ConfigurationError(f"'{switch}' must be true or false")
            if value:
                apply()

        for key, value in table.items():
            if key in ("allow_all", "warn_all", "deny_all"):
                continue
            level = _LEVELS_BY_NAME.get(value) if isinstance(value, str) else None
            if level is None:
                raise ConfigurationError(
                    f"invalid level {value!r} for '{key}' (expected allow, warn or deny)"
                )
            config.set_level(key, level)
        return config

    @classmethod
    def from_toml(cls, path: Union[str, Path]) -> "LintConfiguration":
        """
        Load the ``[lint]`` table of a solscope.toml file.

        Raises:
            ConfigurationError: If the file is unreadable, not TOML, or invalid
        """
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except OSError as e:
            raise ConfigurationError(f"cannot read configuration {path}: {e.strerror}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"invalid TOML in {path}: {e}") from e

        table = data.get("lint", {})
        if not isinstance(table, dict):
            raise ConfigurationError(f"[lint] in {path} must be a table")
        return cls.from_mapping(table)


__all__ = [
    "LintLevel",
    "LintCategory",
    "LintRule",
    "LintViolation",
    "LintConfiguration",
    "USE_BEFORE_DEFINE",
    "USE_IN_OWN_INITIALIZER",
    "ALL_RULES",
    "RULES_BY_NAME",
    "get_rule",
    "get_rule_by_name",
    "get_rule_by_code",
    "get_rules_by_category",
]
