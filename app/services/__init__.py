"""
Services Package
Business logic behind the API routes
"""

from app.services.complaint_service import ComplaintService
from app.services.analytics_service import AnalyticsService
from app.services.directory_service import DirectoryService
from app.services.storage_service import LocalStorageService

__all__ = [
    'ComplaintService',
    'AnalyticsService',
    'DirectoryService',
    'LocalStorageService',
]
