"""Build a canonical Schema from SQL DDL statements."""

import re
from collections import Counter
from typing import Dict, List, Optional, Tuple

from sqlglot import exp, parse

from schemacaps.global_models import Cardinality, FieldKind
from schemacaps.schema.models import Model, RelationInfo, Schema, SchemaField

# sqlglot DataType.Type names -> canonical scalar types
_TYPE_MAP: Dict[str, str] = {
    **dict.fromkeys(
        ["CHAR", "NCHAR", "VARCHAR", "NVARCHAR", "TEXT", "TINYTEXT", "MEDIUMTEXT",
         "LONGTEXT", "BPCHAR", "NAME"],
        "String",
    ),
    **dict.fromkeys(
        ["TINYINT", "UTINYINT", "SMALLINT", "USMALLINT", "MEDIUMINT", "UMEDIUMINT",
         "INT", "UINT", "SERIAL", "SMALLSERIAL"],
        "Int",
    ),
    **dict.fromkeys(["BIGINT", "UBIGINT", "BIGSERIAL"], "BigInt"),
    **dict.fromkeys(["FLOAT", "DOUBLE"], "Float"),
    **dict.fromkeys(["DECIMAL", "BIGDECIMAL", "MONEY", "SMALLMONEY"], "Decimal"),
    **dict.fromkeys(["BOOLEAN", "BIT"], "Boolean"),
    **dict.fromkeys(
        ["DATE", "DATETIME", "DATETIME64", "TIMESTAMP", "TIMESTAMPTZ", "TIMESTAMPLTZ",
         "TIMESTAMP_S", "TIMESTAMP_MS", "TIMESTAMP_NS", "TIME", "TIMETZ"],
        "DateTime",
    ),
    **dict.fromkeys(["JSON", "JSONB"], "Json"),
    **dict.fromkeys(["BINARY", "VARBINARY", "BLOB", "LONGBLOB", "MEDIUMBLOB"], "Bytes"),
    "UUID": "Uuid",
}

_SERIAL_TYPES = {"SERIAL", "SMALLSERIAL", "BIGSERIAL"}
_FK_SUFFIX = re.compile(r"(_id|_ID|Id|ID)$")


class _ColumnDef:
    """Column facts collected before fields are materialized."""

    def __init__(self, name: str, sql_type: str):
        self.name = name
        self.sql_type = sql_type
        self.not_null = False
        self.primary_key = False
        self.unique = False
        self.default: Optional[str] = None


class _ForeignKeyDef:
    def __init__(self, columns: List[str], target: str, references: List[str]):
        self.columns = columns
        self.target = target
        self.references = references
        self.relation_field: Optional[str] = None
        self.relation_name: Optional[str] = None


class _TableDef:
    def __init__(self, name: str):
        self.name = name
        self.columns: List[_ColumnDef] = []
        self.primary_key: List[str] = []
        self.uniques: List[Tuple[str, ...]] = []
        self.foreign_keys: List[_ForeignKeyDef] = []
        self.back_references: List[SchemaField] = []

    def column(self, name: str) -> Optional[_ColumnDef]:
        for col in self.columns:
            if col.name == name:
                return col
        return None


def parse_ddl_to_schema(ddl: str, dialect: str = "postgres") -> Schema:
    """Build a Schema from CREATE TABLE statements.

    Column definitions become scalar fields. Foreign keys (inline REFERENCES
    or table-level FOREIGN KEY constraints) become an owning relation field on
    the referencing model and a back-reference on the referenced model.
    Statements other than CREATE TABLE with column definitions are ignored.

    Args:
        ddl: SQL string containing one or more CREATE TABLE statements
        dialect: SQL dialect for parsing

    Returns:
        Schema with one model per table

    Raises:
        ParseError: If the DDL cannot be parsed
        ValueError: If two tables share a name
    """
    tables: Dict[str, _TableDef] = {}
    for expr in parse(ddl, dialect=dialect):
        table = _table_from_create(expr, dialect)
        if table is None:
            continue
        if table.name in tables:
            raise ValueError(f"Table '{table.name}' is defined more than once")
        tables[table.name] = table

    _name_relations(tables)
    models = [_build_model(table, tables) for table in tables.values()]
    return Schema(models)


def _table_from_create(expr: Optional[exp.Expression], dialect: str) -> Optional[_TableDef]:
    """Collect columns and constraints of one CREATE TABLE statement."""
    if expr is None or not isinstance(expr, exp.Create):
        return None
    if str(expr.args.get("kind") or "").upper() != "TABLE":
        return None

    target = expr.this
    if not isinstance(target, exp.Schema) or not isinstance(target.this, exp.Table):
        return None

    table = _TableDef(target.this.name)
    for node in target.expressions:
        if isinstance(node, exp.ColumnDef):
            _add_column(table, node, dialect)
        elif isinstance(node, exp.Constraint):
            for inner in node.expressions:
                _add_table_constraint(table, inner)
        else:
            _add_table_constraint(table, node)

    if not table.columns:
        return None
    return table


def _add_column(table: _TableDef, node: exp.ColumnDef, dialect: str) -> None:
    kind = node.args.get("kind")
    sql_type = kind.this.name if isinstance(kind, exp.DataType) else "UNKNOWN"
    column = _ColumnDef(node.name, sql_type)
    if sql_type in _SERIAL_TYPES:
        column.default = "autoincrement()"

    for constraint in node.args.get("constraints") or []:
        ckind = constraint.args.get("kind")
        if isinstance(ckind, exp.NotNullColumnConstraint):
            column.not_null = not ckind.args.get("allow_null")
        elif isinstance(ckind, exp.PrimaryKeyColumnConstraint):
            column.primary_key = True
        elif isinstance(ckind, exp.UniqueColumnConstraint):
            column.unique = True
        elif isinstance(ckind, exp.DefaultColumnConstraint):
            column.default = _normalize_default(ckind.this, dialect)
        elif isinstance(
            ckind,
            (exp.AutoIncrementColumnConstraint, exp.GeneratedAsIdentityColumnConstraint),
        ):
            column.default = "autoincrement()"
        elif isinstance(ckind, exp.Reference):
            target, references = _reference_target(ckind)
            if target:
                table.foreign_keys.append(_ForeignKeyDef([column.name], target, references))

    table.columns.append(column)


def _add_table_constraint(table: _TableDef, node: exp.Expression) -> None:
    if isinstance(node, exp.PrimaryKey):
        table.primary_key = _column_names(node.expressions)
    elif isinstance(node, exp.UniqueColumnConstraint):
        columns = tuple(_column_names([node.this] if node.this is not None else []))
        if columns:
            table.uniques.append(columns)
    elif isinstance(node, exp.ForeignKey):
        reference = node.args.get("reference")
        if isinstance(reference, exp.Reference):
            target, references = _reference_target(reference)
            columns = _column_names(node.expressions)
            if target and columns:
                table.foreign_keys.append(_ForeignKeyDef(columns, target, references))


def _column_names(nodes: List[exp.Expression]) -> List[str]:
    """Collect column identifiers from constraint column lists."""
    names: List[str] = []
    for node in nodes:
        if isinstance(node, exp.Identifier):
            names.append(node.name)
            continue
        for ident in node.find_all(exp.Identifier):
            names.append(ident.name)
    return names


def _reference_target(reference: exp.Reference) -> Tuple[Optional[str], List[str]]:
    table = reference.find(exp.Table)
    if table is None:
        return None, []
    columns: List[str] = []
    if isinstance(reference.this, exp.Schema):
        columns = _column_names(reference.this.expressions)
    return table.name, columns


def _normalize_default(value: Optional[exp.Expression], dialect: str) -> Optional[str]:
    if value is None:
        return None
    text = value.sql(dialect=dialect)
    lowered = text.lower()
    if "uuid" in lowered:
        return "uuid()"
    if "now" in lowered or "current_timestamp" in lowered:
        return "now()"
    if "nextval" in lowered:
        return "autoincrement()"
    return text


def _lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def _plural(name: str) -> str:
    return name if name.endswith("s") else f"{name}s"


def _unique_name(base: str, taken: set) -> str:
    candidate = base
    counter = 2
    while candidate in taken:
        candidate = f"{base}{counter}"
        counter += 1
    taken.add(candidate)
    return candidate


def _name_relations(tables: Dict[str, _TableDef]) -> None:
    """Assign relation field names and, for multiply-linked pairs, relation names."""
    links = Counter(
        frozenset((table.name, fk.target))
        for table in tables.values()
        for fk in table.foreign_keys
    )
    taken = {name: {c.name for c in table.columns} for name, table in tables.items()}

    for table in tables.values():
        for fk in table.foreign_keys:
            stripped = _FK_SUFFIX.sub("", fk.columns[0]) if len(fk.columns) == 1 else ""
            base = stripped or _lower_first(fk.target)
            fk.relation_field = _unique_name(base, taken[table.name])
            if links[frozenset((table.name, fk.target))] > 1:
                fk.relation_name = f"{table.name}_{fk.relation_field}"

    for table in tables.values():
        for fk in table.foreign_keys:
            target = tables.get(fk.target)
            if target is None:
                continue
            one_to_one = _fk_is_unique(table, fk.columns)
            if fk.target == table.name and re.match(r"^parent", fk.relation_field, re.I):
                base = "children"
            elif fk.relation_name:
                base = f"{_plural(_lower_first(table.name))}_by_{fk.relation_field}"
            elif one_to_one:
                base = _lower_first(table.name)
            else:
                base = _plural(_lower_first(table.name))
            name = _unique_name(base, taken[target.name])
            target.back_references.append(
                SchemaField(
                    name=name,
                    kind=FieldKind.RELATION,
                    type=table.name,
                    cardinality=Cardinality.SINGLE if one_to_one else Cardinality.LIST,
                    required=False,
                    relation=RelationInfo(
                        target_model=table.name,
                        relation_name=fk.relation_name,
                    ),
                )
            )


def _fk_is_unique(table: _TableDef, columns: List[str]) -> bool:
    if len(columns) == 1:
        column = table.column(columns[0])
        if column is not None and (column.unique or column.primary_key):
            return True
    return tuple(columns) in table.uniques or (
        len(table.primary_key) > 0 and list(columns) == table.primary_key
    )


def _build_model(table: _TableDef, tables: Dict[str, _TableDef]) -> Model:
    pk_columns = set(table.primary_key) | {c.name for c in table.columns if c.primary_key}
    single_pk = len(pk_columns) == 1
    single_uniques = {u[0] for u in table.uniques if len(u) == 1}

    fields: List[SchemaField] = []
    for column in table.columns:
        canonical = _TYPE_MAP.get(column.sql_type)
        is_pk = column.name in pk_columns
        fields.append(
            SchemaField(
                name=column.name,
                kind=FieldKind.SCALAR if canonical else FieldKind.UNSUPPORTED,
                type=canonical or column.sql_type,
                required=column.not_null or is_pk,
                unique=column.unique or column.name in single_uniques,
                has_default=column.default is not None,
                default=column.default,
                is_id=is_pk and single_pk,
            )
        )

    for fk in table.foreign_keys:
        references = fk.references
        target = tables.get(fk.target)
        if not references and target is not None:
            references = target.primary_key or [
                c.name for c in target.columns if c.primary_key
            ]
        fk_required = all(
            _column_required(table, name, pk_columns) for name in fk.columns
        )
        fields.append(
            SchemaField(
                name=fk.relation_field,
                kind=FieldKind.RELATION,
                type=fk.target,
                required=fk_required,
                relation=RelationInfo(
                    target_model=fk.target,
                    fk_field_names=tuple(fk.columns),
                    references=tuple(references),
                    relation_name=fk.relation_name,
                ),
            )
        )

    fields.extend(table.back_references)

    return Model(
        name=table.name,
        fields=tuple(fields),
        primary_key=_composite_key(table) if len(pk_columns) > 1 else (),
        unique_constraints=tuple(u for u in table.uniques if len(u) > 1),
    )


def _column_required(table: _TableDef, name: str, pk_columns: set) -> bool:
    column = table.column(name)
    if column is None:
        return False
    return column.not_null or column.name in pk_columns


def _composite_key(table: _TableDef) -> Tuple[str, ...]:
    if table.primary_key:
        return tuple(table.primary_key)
    return tuple(c.name for c in table.columns if c.primary_key)
