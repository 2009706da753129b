"""Cache layers sharing one async interface: no-op, in-process and Redis-backed."""

__all__ = ["layer", "noop", "local", "redis_cache"]