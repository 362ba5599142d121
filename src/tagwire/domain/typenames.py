from typing import Any, get_origin


def describe_type(tp: Any) -> str:
    """Return a human readable, module qualified name for a type or annotation.

    Args:
        tp: A class or a typing construct such as ``Optional[Foo]``.

    Returns:
        ``module.QualName`` for classes, the bare name for builtins and the
        typing representation (without the ``typing.`` prefix) otherwise.

    Example:
        >>> describe_type(int)
        'int'
        >>> describe_type(Optional[int])
        'Optional[int]'
    """
    if tp is None or tp is type(None):
        return "None"
    if isinstance(tp, str):
        return tp
    if isinstance(tp, type) and get_origin(tp) is None:
        if tp.__module__ == "builtins":
            return tp.__qualname__
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp).replace("typing.", "")
