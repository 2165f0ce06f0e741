"""
binmagic Shared Module
=======================

Configuration, logging and console helpers used by the binmagic engine,
output renderers and CLI.
"""

from shared.config import GlobalConfig, InspectConfig, MagicConfig

__all__ = ["GlobalConfig", "InspectConfig", "MagicConfig"]
