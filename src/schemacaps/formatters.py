"""Output formatters for capability analysis results."""

import csv
import json
from io import StringIO
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from schemacaps.analysis.models import ModelCapabilities

_FLAG_NAMES = (
    "has_search",
    "has_filters",
    "has_find_by_slug",
    "has_published",
    "has_soft_delete",
    "has_views",
    "has_approval",
    "has_featured",
    "has_active",
    "has_parent_child",
    "is_junction_table",
)


def capabilities_to_dict(capabilities: ModelCapabilities) -> Dict[str, Any]:
    """
    Dump capabilities to JSON-compatible data.

    Include plans are rendered as ORM include objects rather than entry lists.

    Args:
        capabilities: Analysis result of one model

    Returns:
        Dictionary ready for json.dumps
    """
    data = capabilities.model_dump(mode="json", exclude={"includes"})
    data["includes"] = {
        "default": capabilities.includes.default.to_include_object(),
        "detailed": capabilities.includes.detailed.to_include_object(),
    }
    return data


class TextFormatter:
    """Format capability results as Rich tables for terminal display."""

    @staticmethod
    def format(results: List[ModelCapabilities], console: Console) -> None:
        """
        Format and print capability results as Rich tables.

        Prints one field table per model, followed by its special fields,
        enabled capability flags, foreign keys and default include.

        Args:
            results: List of ModelCapabilities objects
            console: Rich Console instance for output
        """
        if not results:
            console.print("[yellow]No models found.[/yellow]")
            return

        for i, caps in enumerate(results):
            if i > 0:
                console.print()

            title = caps.model
            if caps.is_junction_table:
                title += " (junction)"
            table = Table(title=title, title_style="bold")

            table.add_column("Field", style="cyan")
            table.add_column("Kind", style="green")
            table.add_column("Filter", style="yellow")
            table.add_column("Search")
            table.add_column("Sort")
            table.add_column("Unique")

            filters = {f.name: f.filter_type.value for f in caps.filter_fields}
            kinds = {name: "scalar" for name in caps.scalar_fields}
            kinds.update({name: "enum" for name in caps.enum_fields})
            kinds.update({name: "relation" for name in caps.relation_fields})
            kinds.update({name: "opaque" for name in caps.opaque_fields})

            for name, kind in kinds.items():
                if name in caps.sensitive_fields:
                    table.add_row(name, kind, Text("(sensitive)", style="dim red"), "", "", "")
                    continue
                table.add_row(
                    name,
                    kind,
                    filters.get(name, ""),
                    "yes" if name in caps.search_fields else "",
                    "yes" if name in caps.sort_fields else "",
                    "yes" if name in caps.unique_fields else "",
                )

            console.print(table)

            special = {k: v for k, v in caps.special_fields.model_dump().items() if v}
            if special:
                console.print(
                    "Special fields: "
                    + ", ".join(f"{key}={value}" for key, value in special.items())
                )
            flags = [name for name in _FLAG_NAMES if getattr(caps, name)]
            if flags:
                console.print(f"Capabilities: {', '.join(flags)}")
            for fk in caps.foreign_keys:
                console.print(
                    f"Foreign key: {', '.join(fk.fields)} -> {fk.target} "
                    f"(via {fk.relation_field})"
                )
            console.print(
                f"[dim]Id: {caps.id_field or '-'} ({caps.id_strategy.value}), "
                f"default include: {', '.join(caps.includes.default.relations) or '-'}[/dim]"
            )


class JsonFormatter:
    """Format capability results as JSON."""

    @staticmethod
    def format(results: List[ModelCapabilities]) -> str:
        """
        Format capability results as JSON.

        Output format:
        {
          "models": [
            {
              "model": "Post",
              "filter_fields": [{"name": "title", "filter_type": "equals", ...}],
              "special_fields": {"slug": "slug", "published": "publishedAt", ...},
              "foreign_keys": [{"fields": ["authorId"], "target": "Author", ...}],
              "includes": {
                "default": {"author": {"select": {"id": true, "name": true}}},
                "detailed": {...}
              },
              ...
            }
          ]
        }

        Args:
            results: List of ModelCapabilities objects

        Returns:
            JSON-formatted string
        """
        return json.dumps(
            {"models": [capabilities_to_dict(caps) for caps in results]}, indent=2
        )


class CsvFormatter:
    """Format capability results as CSV, one row per field."""

    @staticmethod
    def format(results: List[ModelCapabilities]) -> str:
        """
        Format capability results as CSV.

        Output format:
        model,field,kind,filter_type,searchable,sortable,unique,sensitive
        Post,title,scalar,equals,true,true,false,false

        Args:
            results: List of ModelCapabilities objects

        Returns:
            CSV-formatted string
        """
        if not results:
            return ""

        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(
            [
                "model",
                "field",
                "kind",
                "filter_type",
                "searchable",
                "sortable",
                "unique",
                "sensitive",
            ]
        )

        for caps in results:
            filters = {f.name: f.filter_type.value for f in caps.filter_fields}
            groups = (
                ("scalar", caps.scalar_fields),
                ("enum", caps.enum_fields),
                ("relation", caps.relation_fields),
                ("opaque", caps.opaque_fields),
            )
            for kind, names in groups:
                for name in names:
                    writer.writerow(
                        [
                            caps.model,
                            name,
                            kind,
                            filters.get(name, ""),
                            str(name in caps.search_fields).lower(),
                            str(name in caps.sort_fields).lower(),
                            str(name in caps.unique_fields).lower(),
                            str(name in caps.sensitive_fields).lower(),
                        ]
                    )

        return output.getvalue()


class OutputWriter:
    """Write formatted output to file or stdout."""

    @staticmethod
    def write(content: str, output_file: Optional[Path] = None) -> None:
        """
        Write content to file or stdout.

        Args:
            content: The content to write
            output_file: Optional file path. If None, writes to stdout.
        """
        if output_file:
            output_file.write_text(content, encoding="utf-8")
        else:
            print(content)
