"""
Isolation Infrastructure

Source normalization and in-process execution of automation units.
"""

from .code_wrapper import wrap_if_needed, has_imports, has_entry_wrapper
from .module_runner import InProcessModuleRunner

__all__ = ["wrap_if_needed", "has_imports", "has_entry_wrapper", "InProcessModuleRunner"]
