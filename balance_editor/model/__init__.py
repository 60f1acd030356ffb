"""Balance archive model classes."""

from balance_editor.model.balance_entry import BalanceEntry
from balance_editor.model.floor_info import FloorInfoEntry
from balance_editor.model.sir0 import Sir0, Sir0Builder

__all__ = ['BalanceEntry', 'FloorInfoEntry', 'Sir0', 'Sir0Builder']
