"""Loading schema documents into the canonical Schema representation."""

from pathlib import Path
from typing import Any, Dict, List

from pydantic import BaseModel, Field, ValidationError
from sqlglot.errors import ParseError

from schemacaps.schema.ddl import parse_ddl_to_schema
from schemacaps.schema.models import EnumDef, Model, Schema
from schemacaps.utils.file_utils import read_schema_file

JSON_SUFFIXES = {".json"}
YAML_SUFFIXES = {".yaml", ".yml"}
DDL_SUFFIXES = {".sql", ".ddl"}


class SchemaLoadError(Exception):
    """Exception raised when a schema document cannot be loaded."""

    pass


class SchemaDocument(BaseModel):
    """On-disk JSON layout of a schema."""

    models: List[Model] = Field(default_factory=list)
    enums: List[EnumDef] = Field(default_factory=list)

    def to_schema(self) -> Schema:
        return Schema(self.models, self.enums)


def parse_schema_document(content: str) -> Schema:
    """
    Parse a JSON schema document.

    Expected format:
    ```
    {
      "models": [
        {"name": "Author", "fields": [{"name": "id", "type": "Int", "is_id": true}]}
      ],
      "enums": [{"name": "Role", "values": ["ADMIN", "USER"]}]
    }
    ```

    Args:
        content: JSON text

    Returns:
        Schema built from the document

    Raises:
        SchemaLoadError: If the JSON is malformed or does not match the layout
    """
    try:
        document = SchemaDocument.model_validate_json(content)
        return document.to_schema()
    except ValidationError as e:
        raise SchemaLoadError(f"Invalid schema document: {e}") from e
    except ValueError as e:
        raise SchemaLoadError(str(e)) from e


def load_schema_json(input_path: Path) -> Schema:
    """Load a Schema from a JSON document on disk."""
    return parse_schema_document(read_schema_file(input_path))


def load_schema_yaml(input_path: Path) -> Schema:
    """Load a Schema from a YAML document with the JSON document layout.

    Requires PyYAML to be installed.
    """
    try:
        import yaml
    except ImportError:
        raise SchemaLoadError(
            f"Cannot load YAML schema {input_path}: PyYAML is not installed. "
            "Install it with: pip install schema-caps[yaml]"
        )

    try:
        data: Dict[str, Any] = yaml.safe_load(read_schema_file(input_path)) or {}
    except yaml.YAMLError as e:
        raise SchemaLoadError(f"Invalid YAML in {input_path}: {e}") from e

    if not isinstance(data, dict):
        raise SchemaLoadError(
            f"Schema document {input_path} must contain a mapping, "
            f"got {type(data).__name__}"
        )

    try:
        return SchemaDocument.model_validate(data).to_schema()
    except ValidationError as e:
        raise SchemaLoadError(f"Invalid schema document: {e}") from e
    except ValueError as e:
        raise SchemaLoadError(str(e)) from e


def load_schema(input_path: Path, dialect: str = "postgres") -> Schema:
    """
    Load a Schema from a file, choosing the parser by suffix.

    Args:
        input_path: Path to a .json or .yaml document, or a .sql/.ddl file
        dialect: SQL dialect used for DDL files

    Returns:
        Loaded Schema

    Raises:
        FileNotFoundError: If the file doesn't exist
        SchemaLoadError: If the suffix is unknown or the content is invalid
    """
    suffix = input_path.suffix.lower()
    if suffix in JSON_SUFFIXES:
        return load_schema_json(input_path)
    if suffix in YAML_SUFFIXES:
        return load_schema_yaml(input_path)
    if suffix in DDL_SUFFIXES:
        content = read_schema_file(input_path)
        try:
            return parse_ddl_to_schema(content, dialect=dialect)
        except (ParseError, ValueError) as e:
            raise SchemaLoadError(f"Invalid DDL in {input_path}: {e}") from e
    raise SchemaLoadError(
        f"Unsupported schema file type '{input_path.suffix}'. "
        "Use a .json or .yaml document, or a .sql/.ddl file."
    )
