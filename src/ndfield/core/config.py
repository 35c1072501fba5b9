from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Optional

import numpy as np

from .buffers import BufferFactory, auto_factory, boxing, numpy_factory
from .exceptions import ConfigError

if TYPE_CHECKING:
    from .algebra import Field

logger = logging.getLogger(__name__)

_BACKENDS = {"auto", "boxing", "numpy"}


@dataclass(frozen=True)
class BufferConfig:
    """
    Storage switches for array contexts.

    * ``backend`` selects the buffer-construction strategy: ``"boxing"`` keeps
      arbitrary Python objects in a tuple, ``"numpy"`` packs elements into a
      dense numpy array, and ``"auto"`` (default) uses numpy whenever the element
      field advertises a dtype.
    * ``dtype`` overrides the numpy dtype; it is ignored by the boxing backend.
    """

    backend: str = "auto"  # "auto" | "boxing" | "numpy"
    dtype: Optional[str] = None

    def normalized(self) -> "BufferConfig":
        backend = (self.backend or "auto").lower()
        if backend not in _BACKENDS:
            raise ConfigError(f"Unsupported buffer backend: {self.backend}")
        dtype = self.dtype
        if dtype is not None:
            try:
                dtype = np.dtype(dtype).name
            except TypeError as exc:
                raise ConfigError(f"Unsupported buffer dtype: {self.dtype}") from exc
        return replace(self, backend=backend, dtype=dtype)


def resolve_factory(config: Optional[BufferConfig], field: "Field") -> BufferFactory:
    cfg = (config or BufferConfig()).normalized()
    if cfg.backend == "boxing":
        return boxing
    _check_dtype_holds_field(cfg.dtype, field)
    if cfg.backend == "numpy":
        dtype = cfg.dtype or getattr(field, "dtype", None)
        if dtype is None:
            raise ConfigError(
                f"numpy buffer backend requires a dtype; {field!r} does not declare one"
            )
        logger.debug("Resolved numpy buffer factory (dtype=%s)", dtype)
        return numpy_factory(dtype)
    return auto_factory(field, cfg.dtype)


def _check_dtype_holds_field(dtype: Optional[str], field: "Field") -> None:
    native = getattr(field, "dtype", None)
    if dtype is None or native is None:
        return
    if not np.can_cast(native, dtype, casting="same_kind"):
        raise ConfigError(
            f"Buffer dtype {dtype} cannot hold elements of {field!r} (dtype {np.dtype(native)})"
        )
