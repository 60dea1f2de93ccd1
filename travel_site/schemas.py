"""
Pydantic schemas for API request bodies
"""
from pydantic import BaseModel, Field
from typing import Any, List, Optional


# ===== LEADS =====

class EnquiryCreate(BaseModel):
    """Booking enquiry from a package or group tour page"""
    name: str = Field(min_length=1)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+$")
    phone: Optional[str] = None
    destination: Optional[str] = None
    message: Optional[str] = None
    travel_date: Optional[str] = None
    travelers: Optional[int] = Field(default=None, ge=1)
    source: str = "website"
    source_id: Optional[str] = None


class ContactCreate(BaseModel):
    """Contact-us form"""
    name: str = Field(min_length=1)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+$")
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: str = Field(min_length=1)


# ===== ADMIN =====

class PackageUpsert(BaseModel):
    """Admin package edit; id comes from the path"""
    title: str
    country: str
    region: str
    duration: str
    price: str
    country_slug: Optional[str] = None
    original_price: Optional[str] = None
    rating: Optional[float] = None
    reviews: Optional[int] = None
    image: str = ""
    highlights: List[str] = []
    inclusions: List[str] = []
    exclusions: List[str] = []
    itinerary: List[Any] = []
    category: str = ""
    best_time: Optional[str] = None
    group_size: Optional[str] = None
    featured: bool = False


class SeoSettingsUpsert(BaseModel):
    """Admin SEO edit, keyed by page URL"""
    page_url: str = Field(min_length=1)
    meta_title: str
    meta_description: str
    meta_keywords: Optional[str] = None
    canonical_url: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    structured_data: Optional[Any] = None
    robots_meta: Optional[str] = None
    page_type: str = "custom"
    is_active: bool = True
