"""
Safe string conversion of arbitrary object graphs.

Renders scalars, dates, sequences and mappings into one flat, delimiter-based string
for logs and diagnostic messages. Containers that contain themselves are replaced by a
recursion marker, objects whose __str__ raises are replaced by an error marker, so a
conversion always terminates and never raises to the caller.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import array
import collections
import collections.abc as abc
import datetime
import enum
import logging
from typing import Any, Callable, TextIO

# Local ----------------------------------------------------------------------------------------------------------------
from safestr.utils import class_name

logger = logging.getLogger(__name__)

__all__ = [
    "RECURSION_PREFIX",
    "RECURSION_SUFFIX",
    "ERROR_PREFIX",
    "ERROR_SEPARATOR",
    "ERROR_MSG_SEPARATOR",
    "ERROR_SUFFIX",
    "append",
    "identity_to_string",
    "to_string",
]

# Markers: [...list@7f3a2c...] for cycles, [!!!Foo@7f3a2c=>ValueError:boom!!!] for failures
RECURSION_PREFIX = "[..."
RECURSION_SUFFIX = "...]"
ERROR_PREFIX = "[!!!"
ERROR_SEPARATOR = "=>"
ERROR_MSG_SEPARATOR = ":"
ERROR_SUFFIX = "!!!]"

TEXT_TYPES = (str, bytes, bytearray, memoryview, collections.UserString)

# Fixed-size indexable containers, rendered the same way as lists
ARRAY_TYPES = (tuple, array.array)


# Methods --------------------------------------------------------------------------------------------------------------


def to_string(obj: Any) -> str | None:
    """
    Convert any object to a string without ever raising or recursing forever.

    Intended for rendering log arguments and diagnostic values whose behavior cannot be
    trusted: containers may reference themselves and user classes may have a broken
    __str__. The whole object graph is rendered eagerly into one flat string.

    Args:
        obj: Any Python object.

    Returns:
        The rendered text, or None if obj is None.

    Dispatch Logic:
        - None → None at top level (nested None renders as 'None')
        - Container already being rendered → RECURSION_PREFIX + identity + RECURSION_SUFFIX
        - datetime/date → 'YYYY-MM-DDThh:mm:ss.mmm' in local time
        - Mapping → '{key=value, ...}' in the mapping's own iteration order
        - tuple, array, list, set and other collections → '[item, ...]'
        - All others → str(obj), or an error marker if str(obj) raises

    Examples:
        >>> to_string({"a": [1, 2], "b": (3,)})
        '{a=[1, 2], b=[3]}'

        >>> a = []
        >>> a.append(a)
        >>> to_string(a)  # doctest: +ELLIPSIS
        '[[...list@...]]'

        >>> to_string(None) is None
        True

    Notes:
        - Shared references that do not form a cycle are rendered in full every time
        - str, bytes, bytearray and UserString are scalars, never decomposed into characters
        - Enum and Flag members are scalars rendered through str()
        - Thread safe: the cycle bookkeeping is local to each call
    """
    if obj is None:
        return None
    parts: list[str] = []
    _append(parts, obj, set())
    return "".join(parts)


def append(out: TextIO, obj: Any) -> None:
    """
    Write the safe string form of obj to a text stream.

    Same rendering as `to_string`, written with a single `out.write()` call. A None
    argument is written as 'None' since a stream has no way to express absence.

    Args:
        out: Writable text stream, such as `io.StringIO` or an open text file.
        obj: Any Python object.

    Examples:
        >>> import io
        >>> buf = io.StringIO()
        >>> append(buf, [1, "two"])
        >>> buf.getvalue()
        '[1, two]'
    """
    parts: list[str] = []
    _append(parts, obj, set())
    out.write("".join(parts))


def identity_to_string(obj: Any) -> str:
    """
    Identity label of an object: class name and id() in lowercase hex.

    Never calls __str__ or __repr__ of obj and never raises, so the label can be used
    inside recursion and error markers. Builtin classes are unqualified ('list@7f...'),
    other classes include their module ('pkg.mod.Foo@7f...').

    Examples:
        >>> identity_to_string(obj := object()) == f"object@{id(obj):x}"
        True
    """
    return f"{_type_name(obj)}@{id(obj):x}"


# Private Methods ------------------------------------------------------------------------------------------------------


def _append(parts: list[str], obj: Any, dejavu: set[int]) -> None:
    """Append the rendering of obj to parts, dejavu holds ids of containers on the current path."""
    if id(obj) in dejavu:
        parts.append(RECURSION_PREFIX + identity_to_string(obj) + RECURSION_SUFFIX)
        return

    # Dispatch on type(obj), isinstance() would consult a user-defined __class__
    cls = type(obj)

    if issubclass(cls, datetime.date):
        parts.append(_guarded(obj, _fmt_date))
        return

    if issubclass(cls, abc.Mapping) or _is_collection(cls):
        _append_container(parts, obj, dejavu)
        return

    parts.append(_guarded(obj, str))


def _append_container(parts: list[str], obj: Any, dejavu: set[int]) -> None:
    start = len(parts)
    dejavu.add(id(obj))
    try:
        if issubclass(type(obj), abc.Mapping):
            parts.append("{")
            for i, (key, value) in enumerate(obj.items()):
                if i:
                    parts.append(", ")
                _append(parts, key, dejavu)
                parts.append("=")
                _append(parts, value, dejavu)
            parts.append("}")
        else:
            parts.append("[")
            for i, item in enumerate(obj):
                if i:
                    parts.append(", ")
                _append(parts, item, dejavu)
            parts.append("]")
    except Exception as e:
        # Broken __iter__/items(), mutation during iteration, or stack exhaustion
        del parts[start:]
        parts.append(_error_marker(obj, e))
    finally:
        dejavu.discard(id(obj))


def _error_marker(obj: Any, exc: BaseException) -> str:
    identity = identity_to_string(obj)
    exc_type = _type_name(exc)
    logger.debug("String conversion of %s failed with %s", identity, exc_type)
    return (
        ERROR_PREFIX
        + identity
        + ERROR_SEPARATOR
        + exc_type
        + ERROR_MSG_SEPARATOR
        + _error_message(obj, exc)
        + ERROR_SUFFIX
    )


def _error_message(obj: Any, exc: BaseException) -> str:
    """Exception message rendered safely from its args, str(exc) is not trusted."""
    try:
        args = tuple(exc.args)
    except Exception:
        return ""
    # obj itself is guarded so `raise ValueError(self)` renders a recursion marker
    parts: list[str] = []
    for i, arg in enumerate(args):
        if i:
            parts.append(", ")
        _append(parts, arg, {id(obj)})
    return "".join(parts)


def _fmt_date(value: datetime.date) -> str:
    """Local time as 'YYYY-MM-DDThh:mm:ss.mmm', dates without time are taken at midnight."""
    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
    else:
        value = datetime.datetime(value.year, value.month, value.day)
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        f".{value.microsecond // 1000:03d}"
    )


def _guarded(obj: Any, render: Callable[[Any], str]) -> str:
    """Call render(obj), substituting an error marker for any exception it raises."""
    try:
        text = render(obj)
    except Exception as e:
        return _error_marker(obj, e)
    return text


def _is_collection(cls: type) -> bool:
    """Sized, re-iterable containers except text-like ones and enum members."""
    # enum.Flag members are iterable and sized since Python 3.11
    if issubclass(cls, TEXT_TYPES) or issubclass(cls, enum.Enum):
        return False
    return issubclass(cls, ARRAY_TYPES) or issubclass(cls, abc.Collection)


def _type_name(obj: Any) -> str:
    try:
        return class_name(type(obj), fully_qualified=True)
    except Exception:
        return "object"
