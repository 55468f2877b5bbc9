"""Bearer tokens and password hashing."""
