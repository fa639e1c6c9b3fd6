"""Exceptions raised by the indexed BMP converter."""


class ConversionError(Exception):
    """Base exception for conversion errors."""


class EmptyInputError(ConversionError):
    """Raised when a conversion is requested without any images."""


class ShapeMismatchError(ConversionError):
    """Raised when pixel or index data does not match the declared size."""
