import hashlib
from importlib import import_module


def import_string(dotted_path):
    try:
        module_path, class_name = dotted_path.rsplit('.', 1)
    except ValueError as err:
        raise ImportError("%s doesn't look like a module path" % dotted_path) from err

    try:
        module = import_module(module_path)
    except ImportError as err:
        raise ImportError('Error importing module %s: "%s"' % (module_path, err)) from err

    try:
        return getattr(module, class_name)
    except AttributeError:
        raise ImportError('Module "%s" does not define a "%s" attribute/class' % (module_path, class_name))


def split_dsn(dsn: str) -> tuple[str, str]:
    """Split a DSN into its driver scheme and the driver specific remainder.

    ``sqlite::memory:`` -> ``('sqlite', ':memory:')``
    """
    scheme, sep, rest = dsn.partition(':')
    if not sep or not scheme:
        return '', dsn
    return scheme.strip().lower(), rest


def parse_dsn_pairs(rest: str) -> dict[str, str]:
    """Parse ``key=value;key=value`` DSN bodies."""
    pairs = {}
    for chunk in rest.split(';'):
        chunk = chunk.strip()
        if not chunk:
            continue
        key, sep, value = chunk.partition('=')
        if not sep:
            raise ValueError(f"Malformed DSN segment: {chunk!r}")
        pairs[key.strip()] = value.strip()
    return pairs


def fingerprint(sql: str) -> str:
    return hashlib.md5(sql.encode('utf-8')).hexdigest()
