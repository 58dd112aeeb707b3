"""
Crossposter Modules
===================

Flask blueprint modules.
"""

__all__ = ['crosspost']
