"""
Utilities.

Submodules:
    - logging_config: loguru setup and the shared Rich console
"""
