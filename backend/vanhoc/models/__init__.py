# vanhoc/models/__init__.py
"""
Models module initialization.

Models exported:
- AccountRecord: Account document stored as JSON in the GitHub repository
"""
from .account import AccountRecord
