"""User-owned tasks with cached, filtered and paginated listing."""
