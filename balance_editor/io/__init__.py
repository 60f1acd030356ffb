"""Binary IO utilities for balance archive parsing."""

from balance_editor.io.reader import Reader
from balance_editor.io.writer import Writer

__all__ = ['Reader', 'Writer']
