"""
Exhibit Shared Module
=====================

Configuration, structured logging, console presentation and byte
statistics used by the Exhibit engine and its command-line front end.
"""

from shared.config import ExhibitConfig, get_config

__all__ = ["ExhibitConfig", "get_config"]
