"""Routers package for the task API."""

from .tasks import router as tasks_router

__all__ = ["tasks_router"]
