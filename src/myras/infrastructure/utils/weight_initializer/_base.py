"""
Name-keyed registry of in-place weight initializers.

Dense layers draw their placeholder kernels and constant biases through this
registry when they are initialized, and `Model.compile` re-draws every Dense
kernel with ``xavier_uniform`` once the neighbouring layer widths are known.

An initializer is any function ``fn(tensor, *args, **kwargs) -> Tensor`` that
overwrites ``tensor`` through `Tensor.copy_from_numpy` and returns the same
object. Writing in place keeps the tensor id stable, which matters because
the optimizer's momentum vectors and the gradient tape both key on it.

    @WeightInitializer.register_initializer("ones")
    def ones(tensor: Tensor) -> Tensor:
        return constant(tensor, 1.0)

    WeightInitializer("ones")(dense.biases)
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, Tuple, TypeVar

from ....domain._errors import ConfigurationError
from ...tensor._tensor import Tensor

InitializerFn = Callable[..., Tensor]
F = TypeVar("F", bound=InitializerFn)


class WeightInitializer:
    """
    Callable handle on one registered initializer.

    Parameters
    ----------
    initializer_name : str
        Registry key, e.g. ``"uniform"`` or ``"xavier_uniform"``.

    Raises
    ------
    ConfigurationError
        If no initializer is registered under `initializer_name`.
    """

    INITIALIZERS: ClassVar[Dict[str, InitializerFn]] = {}

    def __init__(self, initializer_name: str) -> None:
        fn = self.INITIALIZERS.get(initializer_name)
        if fn is None:
            raise ConfigurationError(
                f"No weight initializer named {initializer_name!r}; "
                f"registered: {', '.join(self.available()) or '<none>'}"
            )
        self.name = initializer_name
        self._fn = fn

    @classmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[F], F]:
        """
        Return a decorator that files a function under `name`.

        Re-registering an existing name raises `ConfigurationError` unless
        `overwrite` is set.
        """
        if not name:
            raise ConfigurationError("Initializer name must be non-empty")

        def decorator(fn: F) -> F:
            if name in cls.INITIALIZERS and not overwrite:
                raise ConfigurationError(
                    f"Weight initializer {name!r} is already registered"
                )
            cls.INITIALIZERS[name] = fn
            return fn

        return decorator

    @classmethod
    def available(cls) -> Tuple[str, ...]:
        return tuple(sorted(cls.INITIALIZERS))

    def __call__(self, tensor: Tensor, *args: Any, **kwargs: Any) -> Tensor:
        """Initialize `tensor` in place and return it."""
        return self._fn(tensor, *args, **kwargs)

    def __repr__(self) -> str:
        return f"WeightInitializer({self.name!r})"
