"""
Safestr utilities shared across the package.

Contains functions used by multiple modules to avoid circular imports.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any


# Methods --------------------------------------------------------------------------------------------------------------


def class_name(
    obj: Any,
    fully_qualified: bool = False,
    fully_qualified_builtins: bool = False,
) -> str:
    """
    Get the class name of an object or a class.

    Returns class name whether given an instance or the class itself.
    For example, both `class_name(10)` and `class_name(int)` return 'int'.

    The class of an instance is taken from `type(obj)`, so an overridden
    `__class__` attribute is ignored and no user code is executed for ordinary
    classes. Nested classes are reported by their `__qualname__`.

    Parameters:
        obj (Any): An object or a class.
        fully_qualified (bool): If true, returns the fully qualified name for user objects or classes.
        fully_qualified_builtins (bool): If true, returns the fully qualified name for builtin objects or classes.

    Returns:
        str: The class name.

    Examples:
        Basic usage with a builtin instance:
            >>> class_name(10)
            'int'

        Fully qualified name for a builtin (when enabled):
            >>> class_name(10, fully_qualified_builtins=True)
            'builtins.int'

        User-defined class: instance and class object:
            >>> class C: ...
            >>> class_name(C())
            'C'
            >>> class_name(C, fully_qualified=True)
            'safestr.utils.C'
    """

    # Check if the obj is a class, type(obj) is used instead of obj.__class__
    cls = obj if issubclass(type(obj), type) else type(obj)

    name = cls.__qualname__
    module = cls.__module__

    # If class is builtin
    if module == "builtins":
        if fully_qualified_builtins:
            return module + "." + name
        return name

    if fully_qualified and module:
        return module + "." + name
    return name
