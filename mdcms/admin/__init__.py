"""
Admin Module

Password-protected dashboard over visit analytics and the document list.
"""

from .factory import create_admin_module

__all__ = ["create_admin_module"]
