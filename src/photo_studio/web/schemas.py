"""Pydantic schemas for the web API.

JSON bodies use camelCase; snake_case field names are accepted too.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RecordResponse(CamelModel):
    id: str
    created_at: datetime
    updated_at: datetime


class MessageResponse(CamelModel):
    success: bool = True
    message: str


# Auth

class LoginRequest(CamelModel):
    email: str
    password: str


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class ClientSession(CamelModel):
    id: str
    name: str
    email: str


class PasswordChange(CamelModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None


# Packs

class PackCreate(CamelModel):
    name: str
    description: Optional[str] = None
    price: float = Field(default=0.0, ge=0)
    duration: Optional[str] = None
    cover_image: Optional[str] = None
    features: List[str] = []
    category: Optional[str] = None
    active: bool = True
    order: int = 0


class PackUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    duration: Optional[str] = None
    cover_image: Optional[str] = None
    features: Optional[List[str]] = None
    category: Optional[str] = None
    active: Optional[bool] = None
    order: Optional[int] = None


class PackResponse(RecordResponse):
    name: str
    description: Optional[str] = None
    price: float
    duration: Optional[str] = None
    cover_image: Optional[str] = None
    features: List[str] = []
    category: Optional[str] = None
    active: bool
    order: int
    booking_count: Optional[int] = None


class PackSummary(CamelModel):
    id: str
    name: str
    price: float


# Bookings

class BookingCreate(CamelModel):
    """Booking form submission; required fields are checked by the service."""
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    event_type: Optional[str] = None
    requested_date: Optional[str] = None
    time_slot: Optional[str] = None
    location: Optional[str] = None
    message: Optional[str] = None
    pack_name: Optional[str] = None
    package_price: Optional[float] = None
    pack_id: Optional[str] = None
    events: Optional[List[Dict[str, Any]]] = None


class TrackRequest(CamelModel):
    name: str
    phone: str
    action: str
    package_name: Optional[str] = None
    package_price: Optional[float] = None


class TrackResponse(CamelModel):
    success: bool = True
    tracking_id: str


class BookingStatusUpdate(CamelModel):
    status: str
    admin_notes: Optional[str] = None


class BookingResponse(RecordResponse):
    name: str
    email: Optional[str] = None
    phone: str
    event_type: str
    event_date: datetime
    time_slot: str
    location: str
    message: Optional[str] = None
    package_name: Optional[str] = None
    package_price: Optional[float] = None
    pack_id: Optional[str] = None
    pack: Optional[PackSummary] = None
    events: Optional[List[Dict[str, Any]]] = None
    status: str
    admin_notes: Optional[str] = None
    calendar_event_id: Optional[str] = None


class BookingGroup(CamelModel):
    client_name: str
    client_phone: str
    client_email: Optional[str] = None
    bookings: List[BookingResponse]
    total_bookings: int


class CalendarEventResponse(RecordResponse):
    date: datetime
    title: str
    client_name: Optional[str] = None
    event_type: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    status: str
    price: Optional[float] = None


class BlockedDateCreate(CamelModel):
    date: Optional[str] = None
    reason: Optional[str] = None


class BlockedDateResponse(CamelModel):
    id: str
    date: datetime
    reason: Optional[str] = None


# Portfolio media

class ImageCreate(CamelModel):
    url: str
    title: str
    cdn_public_id: Optional[str] = None
    thumbnail_url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    tags: List[str] = []
    featured: bool = False
    show_on_homepage: bool = False
    show_in_gallery: bool = True
    professional_mode: bool = False
    order: int = 0
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None


class ImageUpdate(CamelModel):
    url: Optional[str] = None
    title: Optional[str] = None
    thumbnail_url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    featured: Optional[bool] = None
    show_on_homepage: Optional[bool] = None
    show_in_gallery: Optional[bool] = None
    professional_mode: Optional[bool] = None
    order: Optional[int] = None


class ImageResponse(RecordResponse):
    url: str
    title: str
    cdn_public_id: Optional[str] = None
    thumbnail_url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    tags: List[str] = []
    featured: bool
    show_on_homepage: bool
    show_in_gallery: bool
    professional_mode: bool
    order: int
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None


class VideoCreate(CamelModel):
    url: str
    title: str
    cdn_public_id: Optional[str] = None
    thumbnail_url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    duration: Optional[int] = None
    featured: bool = False
    show_on_homepage: bool = False
    show_in_gallery: bool = True
    professional_mode: bool = False
    order: int = 0


class VideoUpdate(CamelModel):
    url: Optional[str] = None
    title: Optional[str] = None
    thumbnail_url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    duration: Optional[int] = None
    featured: Optional[bool] = None
    show_on_homepage: Optional[bool] = None
    show_in_gallery: Optional[bool] = None
    professional_mode: Optional[bool] = None
    order: Optional[int] = None


class VideoResponse(RecordResponse):
    url: str
    title: str
    cdn_public_id: Optional[str] = None
    thumbnail_url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    duration: Optional[int] = None
    featured: bool
    show_on_homepage: bool
    show_in_gallery: bool
    professional_mode: bool
    order: int


# Team, settings, messages

class TeamMemberCreate(CamelModel):
    name: str
    role: str
    bio: Optional[str] = None
    photo_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    order: int = 0
    active: bool = True


class TeamMemberUpdate(CamelModel):
    name: Optional[str] = None
    role: Optional[str] = None
    bio: Optional[str] = None
    photo_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    order: Optional[int] = None
    active: Optional[bool] = None


class TeamMemberResponse(RecordResponse):
    name: str
    role: str
    bio: Optional[str] = None
    photo_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    order: int
    active: bool


class ContactSettingsResponse(CamelModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    whatsapp_number: Optional[str] = None
    location: Optional[str] = None
    instagram_url: Optional[str] = None
    facebook_url: Optional[str] = None
    youtube_url: Optional[str] = None


class SettingsUpdate(ContactSettingsResponse):
    instagram_access_token: Optional[str] = None
    instagram_user_id: Optional[str] = None
    instagram_username: Optional[str] = None
    instagram_auto_sync: Optional[bool] = None


class SettingsResponse(ContactSettingsResponse):
    id: str
    instagram_user_id: Optional[str] = None
    instagram_username: Optional[str] = None
    instagram_last_sync: Optional[datetime] = None
    instagram_auto_sync: bool = False
    instagram_connected: bool = False


class ContactMessageCreate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None
    phone: Optional[str] = None
    subject: Optional[str] = None


class ContactMessageResponse(RecordResponse):
    name: str
    email: str
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: str
    status: str


class StatusUpdate(CamelModel):
    status: str


# Testimonials

class TestimonialSubmit(CamelModel):
    """Client portal feedback; rating and comment are checked by the service."""
    rating: Optional[int] = None
    comment: Optional[str] = None
    event_type: Optional[str] = None
    event_date: Optional[str] = None
    photo_url: Optional[str] = None


class TestimonialCreate(TestimonialSubmit):
    client_name: Optional[str] = None
    approved: Optional[bool] = None
    featured: Optional[bool] = None


class TestimonialReview(CamelModel):
    approved: Optional[bool] = None
    featured: Optional[bool] = None


class TestimonialResponse(RecordResponse):
    client_id: Optional[str] = None
    client_name: str
    client_email: Optional[str] = None
    rating: int
    comment: str
    event_type: Optional[str] = None
    event_date: Optional[datetime] = None
    photo_url: Optional[str] = None
    approved: bool
    featured: bool


class PublicTestimonial(CamelModel):
    id: str
    client_name: str
    rating: int
    comment: str
    event_type: Optional[str] = None
    event_date: Optional[datetime] = None
    photo_url: Optional[str] = None
    featured: bool
    created_at: datetime


# Clients and galleries

class ClientCreate(CamelModel):
    name: str
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: Optional[str] = None


class ClientUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6)
    phone: Optional[str] = None
    active: Optional[bool] = None


class ClientResponse(RecordResponse):
    name: str
    email: str
    phone: Optional[str] = None
    active: bool


class GalleryCreate(CamelModel):
    client_id: str
    name: str
    description: Optional[str] = None
    expires_at: Optional[str] = None
    allow_download: bool = True
    password: Optional[str] = None


class GalleryUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    cover_image: Optional[str] = None
    expires_at: Optional[str] = None
    allow_download: Optional[bool] = None
    password: Optional[str] = None


class PhotoInput(CamelModel):
    url: str
    cdn_public_id: Optional[str] = None
    thumbnail_url: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    file_size: Optional[int] = None


class PhotosAdd(CamelModel):
    gallery_id: str
    photos: List[PhotoInput]


class PhotoResponse(RecordResponse):
    gallery_id: str
    cdn_public_id: Optional[str] = None
    url: str
    thumbnail_url: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    file_size: Optional[int] = None
    order: int
    photo_number: int
    selected_for_print: bool


class GalleryResponse(RecordResponse):
    client_id: str
    name: str
    description: Optional[str] = None
    cover_image: Optional[str] = None
    expires_at: Optional[datetime] = None
    allow_download: bool
    selected_photo_ids: Optional[List[str]] = None
    selection_approved_at: Optional[datetime] = None
    photo_count: int = 0
    photos: List[PhotoResponse] = []


class BulkPhotoIds(CamelModel):
    photo_ids: List[str]


class PhotoBulkFields(CamelModel):
    selected_for_print: Optional[bool] = None
    order: Optional[int] = None
    thumbnail_url: Optional[str] = None


class BulkPhotoEdit(CamelModel):
    photo_ids: List[str]
    updates: PhotoBulkFields


class CountResponse(CamelModel):
    success: bool = True
    count: int


class PrintSelection(CamelModel):
    photo_id: str
    selected: bool


class GallerySelection(CamelModel):
    photo_ids: List[str]


# Photobooks

class PhotobookCreate(CamelModel):
    gallery_id: str
    format: str
    title: Optional[str] = None


class PhotobookPageInput(CamelModel):
    page_number: Optional[int] = None
    layout_type: Optional[str] = None
    photos: List[Dict[str, Any]] = []
    notes: Optional[str] = None


class PhotobookSubmit(CamelModel):
    photobook_id: str
    pages: List[PhotobookPageInput] = []
    title: Optional[str] = None
    notes: Optional[str] = None


class PhotobookPageResponse(RecordResponse):
    page_number: int
    layout_type: str
    photos: List[Dict[str, Any]] = []
    notes: Optional[str] = None


class PhotobookResponse(RecordResponse):
    client_id: str
    gallery_id: str
    title: str
    format: str
    status: str
    notes: Optional[str] = None
    total_pages: int
    cover_photo_url: Optional[str] = None
    submitted_at: Optional[datetime] = None
    pages: List[PhotobookPageResponse] = []


class PhotobookEnvelope(CamelModel):
    photobook: Optional[PhotobookResponse] = None


class PhotobookAdminResponse(PhotobookResponse):
    client: Dict[str, str]
    gallery: Dict[str, str]


# Invoices

class InvoiceItem(CamelModel):
    description: str
    quantity: float = 1
    unit_price: float = 0
    total: Optional[float] = None


class InvoiceCreate(CamelModel):
    items: Optional[List[InvoiceItem]] = None
    service_description: Optional[str] = None
    client_address: Optional[str] = None
    subtotal: Optional[float] = None
    tax_rate: Optional[float] = Field(default=None, ge=0)
    tax_amount: Optional[float] = None
    discount: Optional[float] = Field(default=None, ge=0)
    total_amount: Optional[float] = None
    paid_amount: Optional[float] = Field(default=None, ge=0)
    payment_method: Optional[str] = None
    payment_date: Optional[str] = None
    issue_date: Optional[str] = None
    due_date: Optional[str] = None
    notes: Optional[str] = None
    terms_conditions: Optional[str] = None


class InvoiceUpdate(CamelModel):
    items: Optional[List[InvoiceItem]] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_address: Optional[str] = None
    event_type: Optional[str] = None
    event_date: Optional[str] = None
    event_location: Optional[str] = None
    tax_rate: Optional[float] = Field(default=None, ge=0)
    discount: Optional[float] = Field(default=None, ge=0)
    paid_amount: Optional[float] = Field(default=None, ge=0)
    payment_status: Optional[str] = None
    payment_method: Optional[str] = None
    payment_date: Optional[str] = None
    issue_date: Optional[str] = None
    due_date: Optional[str] = None
    notes: Optional[str] = None
    terms_conditions: Optional[str] = None


class InvoiceResponse(RecordResponse):
    invoice_number: str
    booking_id: Optional[str] = None
    client_name: str
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_address: Optional[str] = None
    event_type: Optional[str] = None
    event_date: Optional[datetime] = None
    event_location: Optional[str] = None
    items: List[InvoiceItem] = []
    subtotal: float
    tax_rate: float
    tax_amount: float
    discount: float
    total_amount: float
    paid_amount: float
    balance: float
    payment_status: str
    payment_method: Optional[str] = None
    payment_date: Optional[datetime] = None
    issue_date: datetime
    due_date: Optional[datetime] = None
    notes: Optional[str] = None
    terms_conditions: Optional[str] = None
    pdf_url: Optional[str] = None


class PdfResponse(CamelModel):
    success: bool = True
    pdf_url: str


# Expenses and salaries

class ExpenseCreate(CamelModel):
    category: str
    description: str
    amount: float = Field(..., ge=0)
    date: str
    payment_method: Optional[str] = None
    notes: Optional[str] = None


class ExpenseUpdate(CamelModel):
    category: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[float] = Field(default=None, ge=0)
    date: Optional[str] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None


class ExpenseResponse(RecordResponse):
    category: str
    description: str
    amount: float
    date: datetime
    payment_method: Optional[str] = None
    notes: Optional[str] = None


class SalaryCreate(CamelModel):
    team_member_id: Optional[str] = None
    gross_amount: float = Field(..., ge=0)
    net_amount: float = Field(..., ge=0)
    payment_date: str
    status: str = "pending"
    period: Optional[str] = None
    notes: Optional[str] = None


class SalaryUpdate(CamelModel):
    team_member_id: Optional[str] = None
    gross_amount: Optional[float] = Field(default=None, ge=0)
    net_amount: Optional[float] = Field(default=None, ge=0)
    payment_date: Optional[str] = None
    status: Optional[str] = None
    period: Optional[str] = None
    notes: Optional[str] = None


class SalaryResponse(RecordResponse):
    team_member_id: Optional[str] = None
    team_member_name: Optional[str] = None
    gross_amount: float
    net_amount: float
    payment_date: datetime
    status: str
    period: Optional[str] = None
    notes: Optional[str] = None


# Instagram

class InstagramPostResponse(RecordResponse):
    instagram_id: str
    caption: Optional[str] = None
    media_type: str
    media_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    permalink: Optional[str] = None
    timestamp: Optional[datetime] = None


class InstagramImportRequest(CamelModel):
    """Media items as returned by the Graph API (snake_case keys)."""
    media: List[Dict[str, Any]]
