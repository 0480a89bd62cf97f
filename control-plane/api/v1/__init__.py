# control-plane/api/v1/__init__.py
"""
API v1 modules
"""

from . import webhook, pods, subnets

__all__ = ["webhook", "pods", "subnets"]
