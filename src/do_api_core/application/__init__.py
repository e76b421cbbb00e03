"""Request execution and pagination built on the domain and infrastructure layers."""

from .executor import DEFAULT_API_ROOT, RequestExecutor
from .pagination import PageWalker

__all__ = ["DEFAULT_API_ROOT", "PageWalker", "RequestExecutor"]
