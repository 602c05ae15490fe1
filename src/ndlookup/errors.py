"""Error conditions reported by lookup tables.

Every condition is recoverable and caller-facing. Table operations carry
them inside a :class:`~ndlookup.result.Result`; the raising adapters
re-raise the carried instance.
"""


class LookupTableError(ValueError):
    """Base class for all lookup table conditions."""


class InvalidTableError(LookupTableError):
    """A query was attempted on a table that is not valid."""


class OutOfDomainError(LookupTableError):
    """A real-valued coordinate lies outside its axis bounds."""


class OutOfBoundsError(LookupTableError, IndexError):
    """An integer index is not smaller than the corresponding axis length."""


class ShapeMismatchError(LookupTableError):
    """Source data does not describe a rectilinear table.

    Raised for fewer than two axes, non-numeric or non-increasing axes, and
    dependent data whose size differs from the product of the axis lengths.
    """


class ArityMismatchError(LookupTableError):
    """A coordinate or index tuple does not have one entry per axis."""
