"""Analyzer configuration and the default capability matcher table."""

import re
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from schemacaps.analysis.errors import ConfigurationError

# Matched against normalized field names (lower case, no '_' or '-')
SENSITIVE_FIELD_PATTERN = (
    r"^(password|token|secret|hash|salt|apikey|privatekey|credential|authcode|refreshtoken)"
)
DEFAULT_PARENT_PATTERN = r"^(parent|ancestor|root)"
DEFAULT_CHILD_PATTERN = r"^(children|child|descendant|subcategor|replies)"

NUMERIC_TYPES = ("Int", "BigInt", "Decimal")


class SpecialFieldMatcher(BaseModel):
    """Name pattern plus type predicate resolving one capability to a field."""

    model_config = ConfigDict(frozen=True)

    pattern: str = Field(..., description="Regex over the normalized field name")
    types: Tuple[str, ...] = Field(
        default=(), description="Accepted field types (empty accepts any type)"
    )

    def matches(self, normalized_name: str, field_type: str) -> bool:
        if self.types and field_type not in self.types:
            return False
        return re.search(self.pattern, normalized_name, re.IGNORECASE) is not None


# Ordered: capabilities are resolved in this order
DEFAULT_SPECIAL_FIELD_MATCHERS: Dict[str, SpecialFieldMatcher] = {
    "slug": SpecialFieldMatcher(pattern=r"^slug$", types=("String",)),
    "published": SpecialFieldMatcher(
        pattern=r"^(is)?published(at|on)?$", types=("Boolean", "DateTime")
    ),
    "views": SpecialFieldMatcher(pattern=r"^(view|views)(count)?$", types=NUMERIC_TYPES),
    "likes": SpecialFieldMatcher(pattern=r"^(like|likes)(count)?$", types=NUMERIC_TYPES),
    "approved": SpecialFieldMatcher(
        pattern=r"^(is)?approved(at)?$", types=("Boolean", "DateTime")
    ),
    "deleted_at": SpecialFieldMatcher(
        pattern=r"^(is)?deleted(at)?$", types=("DateTime", "Boolean")
    ),
    "parent_id": SpecialFieldMatcher(
        pattern=r"^parent(id)?$", types=("Int", "BigInt", "String", "Uuid")
    ),
    "featured": SpecialFieldMatcher(pattern=r"^(is)?featured$", types=("Boolean",)),
    "active": SpecialFieldMatcher(pattern=r"^(is)?active$", types=("Boolean",)),
}

SPECIAL_FIELD_KEYS: Tuple[str, ...] = tuple(DEFAULT_SPECIAL_FIELD_MATCHERS)


class AnalyzerConfig(BaseModel):
    """Configuration shared by every model analysis of a run.

    Validated on construction; an invalid configuration raises
    ConfigurationError before any model is analyzed.
    """

    model_config = ConfigDict(frozen=True)

    sensitive_field_patterns: Tuple[str, ...] = (SENSITIVE_FIELD_PATTERN,)
    special_field_matchers: Dict[str, SpecialFieldMatcher] = Field(
        default_factory=dict,
        description="Per-capability overrides of the default matcher table",
    )
    parent_field_pattern: str = DEFAULT_PARENT_PATTERN
    child_field_pattern: str = DEFAULT_CHILD_PATTERN
    auto_include_required_only: bool = True
    display_field_names: Tuple[str, ...] = ("name", "title", "label", "username", "slug")
    max_display_fields: int = 3
    junction_max_extra_fields: int = 1
    junction_system_field_names: Tuple[str, ...] = (
        "createdAt",
        "updatedAt",
        "assignedAt",
        "addedAt",
        "created_at",
        "updated_at",
        "assigned_at",
        "added_at",
    )

    @model_validator(mode="after")
    def _validate(self) -> "AnalyzerConfig":
        validate_config(self)
        return self

    @property
    def matchers(self) -> Dict[str, SpecialFieldMatcher]:
        """Default matcher table with the configured overrides applied."""
        return {
            key: self.special_field_matchers.get(key, default)
            for key, default in DEFAULT_SPECIAL_FIELD_MATCHERS.items()
        }

    def fingerprint(self) -> str:
        """Stable text identity of this configuration, used as a cache key."""
        return self.model_dump_json()


def _check_pattern(pattern: str, setting: str) -> None:
    try:
        re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(f"Invalid regex for {setting} '{pattern}': {e}") from e


def validate_config(config: AnalyzerConfig) -> None:
    """
    Validate an analyzer configuration.

    Args:
        config: Configuration to check

    Raises:
        ConfigurationError: On unknown matcher keys, an empty sensitive pattern
            list, invalid regexes or negative limits
    """
    for key in config.special_field_matchers:
        if key not in DEFAULT_SPECIAL_FIELD_MATCHERS:
            raise ConfigurationError(
                f"Invalid special field matcher key '{key}'. "
                f"Valid keys: {', '.join(SPECIAL_FIELD_KEYS)}"
            )

    if not config.sensitive_field_patterns:
        raise ConfigurationError("sensitive_field_patterns must not be empty")

    for pattern in config.sensitive_field_patterns:
        _check_pattern(pattern, "sensitive_field_patterns")
    for key, matcher in config.special_field_matchers.items():
        _check_pattern(matcher.pattern, f"special field matcher '{key}'")
    _check_pattern(config.parent_field_pattern, "parent_field_pattern")
    _check_pattern(config.child_field_pattern, "child_field_pattern")

    if config.max_display_fields < 0:
        raise ConfigurationError("max_display_fields must be zero or greater")
    if config.junction_max_extra_fields < 0:
        raise ConfigurationError("junction_max_extra_fields must be zero or greater")
