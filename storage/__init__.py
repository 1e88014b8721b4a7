"""Credential storage backends."""

from .abstract_user_store import AbstractUserStore
from .sql_user_store import SqlUserStore

__all__ = ["AbstractUserStore", "SqlUserStore"]
