"""Placeholder recognition and rewriting.

Statements are written with ``?`` (positional, 1-based) or ``:name`` markers.
The sqlparse lexer is used to find them so that markers inside string
literals, quoted identifiers and comments are left alone. Drivers then get
the statement rewritten to their own positional marker plus the order in which
parameters must be passed.
"""
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from sqlparse import lexer
from sqlparse import tokens as T

from lazyconn.attributes import ParamType

QMARK = '?'
FORMAT = '%s'


class PlaceholderError(ValueError):
    sqlstate = 'HY093'


@dataclass(frozen=True)
class CompiledSQL:
    sql: str
    keys: tuple

    @property
    def named(self) -> bool:
        return any(isinstance(key, str) for key in self.keys)


def normalize_param(param):
    if isinstance(param, str):
        return param[1:] if param.startswith(':') else param
    if isinstance(param, bool) or not isinstance(param, int) or param < 1:
        raise PlaceholderError(f"Invalid parameter {param!r}: use a 1-based position or a :name")
    return param


def compile_sql(sql: str, marker: str = QMARK) -> CompiledSQL:
    parts = []
    keys = []
    position = 0
    previous = ''
    for ttype, value in lexer.tokenize(sql):
        if ttype in T.Name.Placeholder and value == '?':
            position += 1
            keys.append(position)
            parts.append(marker)
        elif ttype in T.Name.Placeholder and value.startswith(':') and not previous.endswith(':'):
            keys.append(value[1:])
            parts.append(marker)
        elif marker == FORMAT:
            parts.append(value.replace('%', '%%'))
        else:
            parts.append(value)
        previous = value
    if position and len(keys) != position:
        raise PlaceholderError("Mixed named and positional parameters")
    if not keys:
        return CompiledSQL(sql, ())
    return CompiledSQL(''.join(parts), tuple(keys))


def convert(value, param_type=ParamType.STR):
    if callable(value):
        value = value()
    if value is None or param_type == ParamType.NULL:
        return None
    if param_type == ParamType.INT:
        return int(value)
    if param_type == ParamType.BOOL:
        return bool(value)
    if param_type == ParamType.LOB:
        return value.encode('utf-8') if isinstance(value, str) else bytes(value)
    if isinstance(value, (bytes, bytearray)):
        return value
    return str(value)


def bind_args(compiled: CompiledSQL, params=None, bound=None):
    """Build the positional argument tuple for ``compiled``.

    ``params`` are the values passed to ``execute``; when omitted the values
    collected by ``bind_value``/``bind_param`` (``bound``, mapping a key to a
    ``(value, param_type)`` pair) are used instead.
    """
    if params is not None:
        if isinstance(params, Mapping):
            values = {normalize_param(key): value for key, value in params.items()}
        elif isinstance(params, Sequence) and not isinstance(params, (str, bytes)):
            values = {index: value for index, value in enumerate(params, start=1)}
        else:
            raise PlaceholderError(f"Parameters must be a mapping or a sequence, {type(params).__name__} given")
    else:
        values = {key: convert(value, param_type) for key, (value, param_type) in (bound or {}).items()}

    if not compiled.keys:
        if values:
            raise PlaceholderError("Parameters given for a statement without placeholders")
        return None

    expected = set(compiled.keys)
    missing = [key for key in compiled.keys if key not in values]
    if missing:
        raise PlaceholderError(f"Parameter {_label(missing[0])} was not defined")
    extra = [key for key in values if key not in expected]
    if extra:
        raise PlaceholderError("Number of bound variables does not match number of tokens")
    return tuple(values[key] for key in compiled.keys)


def _label(key):
    return f":{key}" if isinstance(key, str) else f"#{key}"
