"""Public API surface for ndlookup.

Defines package metadata and exported interfaces.
"""

from typing import Final

# Private API imports (accessible but not in __all__)
# Users can access private functions via: ndlookup._lookup_impl._function_name, etc.
from . import (
    _lookup_core,  # noqa: F401
    _lookup_impl,  # noqa: F401
    _table_data,  # noqa: F401
)

# Public API imports
from .errors import (
    ArityMismatchError,
    InvalidTableError,
    LookupTableError,
    OutOfBoundsError,
    OutOfDomainError,
    ShapeMismatchError,
)
from .lookup_table import LookupTable
from .result import Result
from .tolerance import (
    APPROX_EQUAL_FACTOR,
    ToleranceInfo,
    get_approx_equal_tolerance,
    get_machine_epsilon,
    get_tolerance_info,
    is_approx_equal,
)

# Package metadata
__version__: Final[str] = "0.1.0"
__license__: Final[str] = "MIT"
__author__: Final[str] = "ndlookup developers"

# Public interface: only functions/classes that don't start with _
__all__ = [
    "APPROX_EQUAL_FACTOR",
    "ArityMismatchError",
    "InvalidTableError",
    "LookupTable",
    "LookupTableError",
    "OutOfBoundsError",
    "OutOfDomainError",
    "Result",
    "ShapeMismatchError",
    "ToleranceInfo",
    "__author__",
    "__license__",
    "__version__",
    "get_approx_equal_tolerance",
    "get_machine_epsilon",
    "get_tolerance_info",
    "is_approx_equal",
]
