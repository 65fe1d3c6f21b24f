"""
Role Enumeration Module
=======================

Defines all valid roles stored in ``profiles.role``.

Security Purpose:
- Prevents arbitrary role injection
- Enforces strict backend validation
"""

from enum import Enum


class Role(str, Enum):
    """
    System-wide allowed roles.
    """

    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    OPERATOR = "operator"
    CLIENT = "client"
