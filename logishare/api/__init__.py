"""Public API — the :class:`LogiShare` facade."""

from logishare.api.facade import LogiShare

__all__ = ["LogiShare"]
