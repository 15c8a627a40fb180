"""Database models for the photo studio backend."""

from .base import Base
from .booking import BOOKING_STATUSES, BlockedDate, Booking, CalendarEvent, Pack
from .client import Client, ClientGallery, ClientPhoto, Photobook, PhotobookPage, Testimonial
from .finance import PAYMENT_STATUSES, Expense, Invoice, SalaryPayment
from .media import Image, InstagramHighlight, InstagramPost, InstagramStory, Video
from .site import MESSAGE_STATUSES, AdminUser, ContactMessage, SiteSettings, TeamMember

__all__ = [
    'Base',
    'BOOKING_STATUSES',
    'PAYMENT_STATUSES',
    'MESSAGE_STATUSES',
    'AdminUser',
    'BlockedDate',
    'Booking',
    'CalendarEvent',
    'Client',
    'ClientGallery',
    'ClientPhoto',
    'ContactMessage',
    'Expense',
    'Image',
    'InstagramHighlight',
    'InstagramPost',
    'InstagramStory',
    'Invoice',
    'Pack',
    'Photobook',
    'PhotobookPage',
    'SalaryPayment',
    'SiteSettings',
    'TeamMember',
    'Testimonial',
    'Video',
]
