"""
PhantomHash Shared Module
=========================

Common utilities, models, and configuration management shared across
the PhantomHash analyzers, engine and command-line interface.
"""

from shared.config import PhantomConfig

__all__ = ["PhantomConfig"]
