"""Utility modules for API-specific functionality.

- **responses**: orjson response class and the error envelope helper
- **requests**: Client IP and user agent extraction
"""
