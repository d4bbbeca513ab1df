class ConstructionError(ValueError):
    """Base class for the errors raised while building an alias table."""


class LengthMismatch(ConstructionError):
    """Elements and weights have different lengths."""


class InvalidDistribution(ConstructionError):
    """Weights are negative, not finite, or do not sum to 1."""


class EmptyInput(ConstructionError):
    """No elements were given."""


class SamplingError(RuntimeError):
    """
    Raised when sampling from an empty or inconsistent table.

    Tables built with AliasTable.build never raise this; it only shows up
    when a table was assembled by hand or a die outside the table is passed
    to select().
    """
