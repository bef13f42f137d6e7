"""Error type and small helpers shared across the package."""

from collections.abc import Iterable


class TensorError(RuntimeError):
    """Raised when a graph, tensor or operator invariant does not hold."""


def ensure(condition, message=""):
    """Raise :class:`TensorError` with ``message`` unless ``condition`` holds."""
    if not condition:
        raise TensorError(message or "Assertion failed")


def vec_to_string(values: Iterable) -> str:
    """Render a sequence as ``[a,b,c]``."""
    return "[" + ",".join(str(value) for value in values) + "]"