"""
Crossposter Core
================

Shared configuration for Crossposter modules.
"""

from .config import Config

__all__ = ['Config']
