"""
Intune Role Manager

Creates Microsoft Intune custom RBAC role definitions from CSV or
line-oriented permission files through Microsoft Graph.
"""

__version__ = "1.0.0"

from .libs import IntuneRoleManager, RoleProvisioner, main

__all__ = [
    'IntuneRoleManager',
    'RoleProvisioner',
    'main'
]
