"""Dependency injection for FastAPI endpoints"""

from datetime import date
from fastapi import Request
from agrigrow_lending.infrastructure.clients.notifier import NotificationClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_today() -> date:
    """Clock collaborator: the only place the service reads the current date"""
    return date.today()


def get_notification_client() -> NotificationClient:
    """Provide notification webhook client instance"""
    return NotificationClient()
