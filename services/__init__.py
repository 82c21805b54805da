# Services Module for the collaboration platform
# Contains business logic services

from services.notification_service import NotificationService, NotificationType, get_notification_service

__all__ = [
    'NotificationService',
    'NotificationType',
    'get_notification_service',
]
