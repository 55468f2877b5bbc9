"""User accounts and authentication."""
