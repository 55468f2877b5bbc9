"""Type aliases for dynamic data structures throughout the application.

All types defined here should be JSON-serializable to support logging
and API responses.
"""

from typing import Any

# Context dictionary for error details and debugging information
type ErrorContext = dict[str, Any]

# Field name to message map returned with validation failures
type FieldErrors = dict[str, str]
