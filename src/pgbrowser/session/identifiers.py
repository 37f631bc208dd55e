"""Quoting for names interpolated into SQL text.

Identifiers and literals that cannot be bound as parameters are embedded
after doubling their quote character.
"""


def quote_identifier(name: str) -> str:
    """``my"table`` -> ``"my""table"``"""
    return '"' + name.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    """``O'Brien`` -> ``'O''Brien'``"""
    return "'" + value.replace("'", "''") + "'"


def qualified_name(schema: str, table: str) -> str:
    return f"{quote_identifier(schema)}.{quote_identifier(table)}"


def escape_bind_markers(sql_fragment: str) -> str:
    """Escapes colons so a fragment is not read as ``:name`` placeholders."""
    return sql_fragment.replace(":", "\\:")
