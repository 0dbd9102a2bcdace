"""
CI environment integration.
"""

from .publisher import EnvironmentPublisher

__all__ = ["EnvironmentPublisher"]
