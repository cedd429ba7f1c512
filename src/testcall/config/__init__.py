#
# config/__init__.py
#
"""
Configuration handling sub-package for testcall.

Exports the loading function and core configuration model.
"""

from .loader import load_config
from .models import TestCallConfig

__all__ = [
    "TestCallConfig",
    "load_config",
]

# 🔼⚙️
