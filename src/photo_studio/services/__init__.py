"""Domain services for the photo studio backend."""

from .bookings import BookingService
from .catalog import CatalogService
from .cdn import CloudinaryClient
from .finances import FinanceService
from .galleries import GalleryService
from .instagram import InstagramClient, InstagramSync
from .invoices import InvoiceService
from .photobooks import PhotobookService

__all__ = [
    'BookingService',
    'CatalogService',
    'CloudinaryClient',
    'FinanceService',
    'GalleryService',
    'InstagramClient',
    'InstagramSync',
    'InvoiceService',
    'PhotobookService',
]
