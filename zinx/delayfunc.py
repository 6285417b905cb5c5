"""A callback together with the arguments it is to be called with later."""

from __future__ import annotations

from typing import Any, Callable, Iterable

from zinx import stdlog


class DelayFunc:
    """A deferred call of ``func(*args)``, run when its timer fires."""

    def __init__(self, func: Callable[..., Any], args: Iterable[Any] = ()):
        self.func = func
        self.args = list(args)

    def __str__(self) -> str:
        name = getattr(self.func, "__name__", type(self.func).__name__)
        shown = " ".join(str(arg) for arg in self.args)
        return f"{{DelayFun:{name}, args:[{shown}]}}"

    def call(self) -> Any:
        """Call the function; an exception is logged, not raised.

        Returns the function's result, or ``None`` if it raised.
        """
        try:
            return self.func(*self.args)
        except Exception as exc:
            stdlog.error(str(self), "Call err: ", repr(exc))
            return None