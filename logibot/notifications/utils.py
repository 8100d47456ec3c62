"""Helpers other apps use to raise notifications"""
import logging

from .models import Notification

logger = logging.getLogger(__name__)


def create_notification(title, message, type='system', severity='info', metadata=None):
    """Create a notification for the shared feed"""
    notification = Notification.objects.create(
        title=title,
        message=message,
        type=type,
        severity=severity,
        metadata=metadata or {},
    )
    logger.info(f"Notification created ({type}/{severity}): {title}")
    return notification
