"""
Storage abstraction layer.
"""
from .repositories import TaskRepository

__all__ = ['TaskRepository']
