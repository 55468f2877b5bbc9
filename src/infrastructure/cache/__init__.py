"""Redis-backed infrastructure: connection management, list cache, rate limiting.

Redis is an accelerator, never a source of truth. Every operation in this
package degrades gracefully when Redis is unreachable.
"""
