"""Database layer for Tubetrack: pooled psycopg2 connections and table repositories."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol

from psycopg2.extensions import connection as PsycopgConnection


class ConnectionFactory(Protocol):
    """Callable yielding a connection whose block is one transaction (commit or roll back)."""

    def __call__(self) -> AbstractContextManager[PsycopgConnection]:
        """Return a context manager wrapping a single transaction."""


__all__ = ["ConnectionFactory"]
