"""Core application constants."""

# Time constants
MILLISECONDS_PER_SECOND = 1000

# Security and redaction
REDACTED = "[REDACTED]"

# bcrypt only hashes the first 72 bytes of its input
BCRYPT_MAX_PASSWORD_BYTES = 72
