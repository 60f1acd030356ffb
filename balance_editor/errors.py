"""Exceptions raised by the balance archive codecs."""


class BalanceEditorError(Exception):
    """Base exception for the balance editor."""


class MalformedContainerError(BalanceEditorError, ValueError):
    """A container header, pointer or region falls outside its buffer."""


class IndexOutOfRangeError(BalanceEditorError, IndexError):
    """An archive index is outside the archive's entry count."""


class FieldTooLongError(BalanceEditorError, ValueError):
    """A fixed-width text field does not fit its byte budget."""


class DecompressionError(BalanceEditorError):
    """The compression collaborator could not decode an entry."""


class InvalidTextError(BalanceEditorError, ValueError):
    """A fixed-width text field holds characters its encoding cannot represent."""
