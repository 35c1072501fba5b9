from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _load_version

from .core.algebra import ComplexField, Field, PrimeField, RationalField, RealField
from .core.buffers import (
    ArrayBuffer,
    Buffer,
    BufferFactory,
    ListBuffer,
    as_buffer,
    auto_factory,
    boxing,
    numpy_factory,
)
from .core.config import BufferConfig, resolve_factory
from .core.exceptions import (
    ConfigError,
    NDFieldError,
    NDIndexError,
    ShapeError,
    ShapeMismatchError,
)
from .core.fields import (
    BufferNDElement,
    BufferNDField,
    StridedNDField,
    elementwise,
    nd_field,
)
from .core.strides import DefaultStrides, Strides
from .core.structures import (
    ArrayStructure,
    NDBuffer,
    NDStructure,
    content_equals,
    nd_structure,
    to_numpy,
)

try:
    __version__ = _load_version("ndfield")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "Field",
    "RealField",
    "ComplexField",
    "RationalField",
    "PrimeField",
    "Buffer",
    "ListBuffer",
    "ArrayBuffer",
    "BufferFactory",
    "boxing",
    "numpy_factory",
    "auto_factory",
    "as_buffer",
    "BufferConfig",
    "resolve_factory",
    "NDFieldError",
    "ShapeError",
    "ShapeMismatchError",
    "NDIndexError",
    "ConfigError",
    "Strides",
    "DefaultStrides",
    "NDStructure",
    "NDBuffer",
    "ArrayStructure",
    "nd_structure",
    "content_equals",
    "to_numpy",
    "StridedNDField",
    "BufferNDField",
    "BufferNDElement",
    "nd_field",
    "elementwise",
    "__version__",
]
