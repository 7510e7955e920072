"""CLI entry point for schemacaps."""

from io import StringIO
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from schemacaps.analysis.builder import CapabilitiesBuilder, analyze_schema
from schemacaps.analysis.errors import AnalysisError, ConfigurationError
from schemacaps.analysis.models import ModelCapabilities
from schemacaps.formatters import CsvFormatter, JsonFormatter, OutputWriter, TextFormatter
from schemacaps.graph.builder import RelationGraphBuilder
from schemacaps.graph.diagram_formatters import (
    DotFormatter,
    MermaidFormatter,
    MermaidMarkdownFormatter,
)
from schemacaps.schema.loader import SchemaLoadError, load_schema
from schemacaps.schema.validation import validate_schema
from schemacaps.utils.config import build_analyzer_config, load_config

app = typer.Typer(
    name="schemacaps",
    help="Derive data-access capabilities from entity-relationship schemas.",
    invoke_without_command=False,
)
console = Console()
err_console = Console(stderr=True)

OUTPUT_FORMATS = ["text", "json", "csv"]
GRAPH_FORMATS = ["mermaid", "mermaid-markdown", "dot"]

SCHEMA_ARGUMENT = typer.Argument(
    ...,
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
    help="Path to schema file (.json document or .sql DDL)",
)


def _write_text_output(results: List[ModelCapabilities], output_file: Path) -> None:
    """Render Rich tables into a file instead of the terminal."""
    string_buffer = StringIO()
    file_console = Console(file=string_buffer, force_terminal=False)
    TextFormatter.format(results, file_console)
    output_file.write_text(string_buffer.getvalue(), encoding="utf-8")


@app.callback()
def main():
    """schemacaps - schema capability analyzer."""
    pass


@app.command()
def analyze(
    schema_file: Path = SCHEMA_ARGUMENT,
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="Analyze only this model (default: all models)",
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--output-format",
        "-f",
        help="Output format: 'text', 'json', or 'csv' (default: text, or from config)",
    ),
    output_file: Optional[Path] = typer.Option(
        None,
        "--output-file",
        "-o",
        help="Write output to file instead of stdout",
    ),
    dialect: Optional[str] = typer.Option(
        None,
        "--dialect",
        "-d",
        help="SQL dialect for DDL schemas (default: postgres, or from config)",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit with an error when any diagnostic is reported",
    ),
) -> None:
    """
    Analyze the data-access capabilities of schema models.

    Configuration can be set in schemacaps.toml in the current directory.
    CLI arguments override configuration file values.

    Examples:

        # Analyze every model of a JSON schema
        schemacaps analyze schema.json

        # Analyze one model of a DDL file
        schemacaps analyze schema.sql --model posts --dialect mysql

        # Export to JSON
        schemacaps analyze schema.json --output-format json --output-file caps.json
    """
    config = load_config()

    # Apply priority resolution: CLI args > config > defaults
    output_format = output_format or config.output_format or "text"
    dialect = dialect or config.dialect or "postgres"

    if output_format not in OUTPUT_FORMATS:
        err_console.print(
            f"[red]Error:[/red] Invalid output format '{output_format}'. "
            "Use 'text', 'json', or 'csv'."
        )
        raise typer.Exit(1)

    try:
        analyzer_config = build_analyzer_config(config)
    except ConfigurationError as e:
        err_console.print(f"[red]Error:[/red] Invalid configuration: {e}")
        raise typer.Exit(1)

    has_errors = False
    has_diagnostics = False
    try:
        schema = load_schema(schema_file, dialect=dialect)

        if model:
            capabilities = CapabilitiesBuilder(schema, analyzer_config).build(model)
            for diagnostic in capabilities.diagnostics:
                err_console.print(
                    f"[yellow]Warning:[/yellow] {diagnostic.model}: {diagnostic.message}"
                )
            results = [capabilities]
        else:
            analysis = analyze_schema(
                schema, analyzer_config, collect_errors=True, console=err_console
            )
            results = list(analysis.results.values())
            has_errors = analysis.has_failures

        has_diagnostics = any(caps.diagnostics for caps in results)

        if output_format == "text":
            if output_file:
                _write_text_output(results, output_file)
            else:
                TextFormatter.format(results, console)
        elif output_format == "json":
            OutputWriter.write(JsonFormatter.format(results), output_file)
        else:  # csv
            OutputWriter.write(CsvFormatter.format(results), output_file)

        if output_file:
            console.print(f"[green]Success:[/green] Capabilities written to {output_file}")

    except FileNotFoundError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except SchemaLoadError as e:
        err_console.print(f"[red]Error:[/red] Failed to load schema: {e}")
        raise typer.Exit(1)

    except AnalysisError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except Exception as e:
        err_console.print(f"[red]Error:[/red] Unexpected error: {e}")
        raise typer.Exit(1)

    if has_errors:
        raise typer.Exit(1)
    if strict and has_diagnostics:
        err_console.print("[red]Error:[/red] Diagnostics reported in strict mode")
        raise typer.Exit(1)


@app.command()
def validate(
    schema_file: Path = SCHEMA_ARGUMENT,
    dialect: Optional[str] = typer.Option(
        None,
        "--dialect",
        "-d",
        help="SQL dialect for DDL schemas (default: postgres, or from config)",
    ),
) -> None:
    """
    Check a schema for structural errors.

    Reports relations to undefined models, missing key fields, foreign key
    mismatches and circular required relations.

    Examples:

        schemacaps validate schema.json
    """
    config = load_config()
    dialect = dialect or config.dialect or "postgres"

    try:
        schema = load_schema(schema_file, dialect=dialect)
        result = validate_schema(schema)

    except FileNotFoundError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except SchemaLoadError as e:
        err_console.print(f"[red]Error:[/red] Failed to load schema: {e}")
        raise typer.Exit(1)

    except Exception as e:
        err_console.print(f"[red]Error:[/red] Unexpected error: {e}")
        raise typer.Exit(1)

    for warning in result.warnings:
        err_console.print(f"[yellow]Warning:[/yellow] {warning}")
    for error in result.errors:
        err_console.print(f"[red]Error:[/red] {error}")

    if not result.is_valid:
        err_console.print(f"[red]Schema is invalid:[/red] {len(result.errors)} error(s)")
        raise typer.Exit(1)

    console.print(f"[green]Success:[/green] Schema is valid ({len(schema)} model(s))")


@app.command()
def graph(
    schema_file: Path = SCHEMA_ARGUMENT,
    output_format: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Diagram format: 'mermaid', 'mermaid-markdown', or 'dot' (default: mermaid, or from config)",
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="Only draw this model and its direct relations",
    ),
    output_file: Optional[Path] = typer.Option(
        None,
        "--output-file",
        "-o",
        help="Write output to file instead of stdout",
    ),
    dialect: Optional[str] = typer.Option(
        None,
        "--dialect",
        "-d",
        help="SQL dialect for DDL schemas (default: postgres, or from config)",
    ),
) -> None:
    """
    Draw the model relationship graph of a schema.

    Examples:

        # Mermaid erDiagram on stdout
        schemacaps graph schema.json

        # Graphviz DOT for one model
        schemacaps graph schema.sql --format dot --model posts -o posts.dot
    """
    config = load_config()
    output_format = output_format or config.graph_format or "mermaid"
    dialect = dialect or config.dialect or "postgres"

    if output_format not in GRAPH_FORMATS:
        err_console.print(
            f"[red]Error:[/red] Invalid format '{output_format}'. "
            "Use 'mermaid', 'mermaid-markdown', or 'dot'."
        )
        raise typer.Exit(1)

    try:
        schema = load_schema(schema_file, dialect=dialect)
        if model and schema.get_model(model) is None:
            raise ValueError(f"Model '{model}' not found in schema")

        builder = RelationGraphBuilder(schema)
        for source, field, target in builder.dangling_relations:
            err_console.print(
                f"[yellow]Warning:[/yellow] Skipping relation '{source}.{field}' "
                f"to undefined model '{target}'"
            )
        relation_graph = builder.build()

        formatter = {
            "mermaid": MermaidFormatter,
            "mermaid-markdown": MermaidMarkdownFormatter,
            "dot": DotFormatter,
        }[output_format]
        if model:
            formatted = formatter.format_model(relation_graph, model)
        else:
            formatted = formatter.format_full_graph(relation_graph)

        OutputWriter.write(formatted, output_file)
        if output_file:
            console.print(f"[green]Success:[/green] Diagram written to {output_file}")

    except FileNotFoundError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except SchemaLoadError as e:
        err_console.print(f"[red]Error:[/red] Failed to load schema: {e}")
        raise typer.Exit(1)

    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except Exception as e:
        err_console.print(f"[red]Error:[/red] Unexpected error: {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
