# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for entityforge.
"""

from entityforge.config.defaults import (
    DDLDefaults,
    DocumentDefaults,
    BuilderDefaults,
    get_defaults,
)

__all__ = [
    "DDLDefaults",
    "DocumentDefaults",
    "BuilderDefaults",
    "get_defaults",
]
