# vanhoc/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Startup tasks (user data folder in the GitHub repository)
- config_providers: GitHub configuration profiles (fixed / override / user)
- local_storage: localStorage-like JSON key/value file
- security: Pluggable password hashing
"""
