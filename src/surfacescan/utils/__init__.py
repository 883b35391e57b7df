"""Shared helpers."""

from .async_utils import safe_async_run

__all__ = ["safe_async_run"]
