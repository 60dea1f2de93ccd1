"""
Database models for the travel site
SQLAlchemy ORM models for packages, countries, site content, blog,
enquiries, group tours and per-page SEO settings
"""
import uuid
from datetime import datetime
from sqlalchemy import (
    Boolean, Column, DateTime, Float, ForeignKey, Integer, JSON, String, Text
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class Package(Base):
    """
    Travel package - one bookable itinerary in a region/country
    """
    __tablename__ = "packages"

    id = Column(String, primary_key=True, default=_uuid)
    slug = Column(String, nullable=True, index=True)
    title = Column(String, nullable=False)
    country = Column(String, nullable=False)
    country_slug = Column(String, nullable=True)
    region = Column(String, nullable=False, index=True)
    duration = Column(String, nullable=False)
    price = Column(String, nullable=False)
    original_price = Column(String, nullable=True)
    rating = Column(Float, nullable=True)
    reviews = Column(Integer, nullable=True)
    image = Column(String, nullable=False, default="")
    highlights = Column(JSON, nullable=True)
    inclusions = Column(JSON, nullable=True)
    exclusions = Column(JSON, nullable=True)
    itinerary = Column(JSON, nullable=True)
    category = Column(String, nullable=False, default="")
    best_time = Column(String, nullable=True)
    group_size = Column(String, nullable=True)
    featured = Column(Boolean, nullable=True, default=False)

    # Overview block
    overview_section_title = Column(String, nullable=True)
    overview_description = Column(Text, nullable=True)
    overview_highlights_label = Column(String, nullable=True)
    overview_badge_variant = Column(String, nullable=True)
    overview_badge_style = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Package(id='{self.id}', title='{self.title}', region='{self.region}')>"


class Country(Base):
    """
    Country destination page data
    """
    __tablename__ = "countries"

    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    region = Column(String, nullable=False, index=True)
    capital = Column(String, nullable=True)
    currency = Column(String, nullable=True)
    languages = Column(JSON, nullable=True)
    best_season = Column(String, nullable=True)
    climate = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    hero_image_url = Column(String, nullable=True)
    travel_tips = Column(Text, nullable=True)
    fun_facts = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Country(slug='{self.slug}', region='{self.region}')>"


class Content(Base):
    """
    Editable site copy - one value per (section, key)
    """
    __tablename__ = "content"

    id = Column(String, primary_key=True, default=_uuid)
    section = Column(String, nullable=False, index=True)
    key = Column(String, nullable=False)
    value = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Content(section='{self.section}', key='{self.key}')>"


# ===== BLOG =====

class BlogCategory(Base):
    __tablename__ = "blog_categories"

    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Author(Base):
    __tablename__ = "authors"

    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    avatar_url = Column(String, nullable=True)
    social_links = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class BlogPost(Base):
    """
    Blog article
    """
    __tablename__ = "blog_posts"

    id = Column(String, primary_key=True, default=_uuid)
    title = Column(String, nullable=False)
    slug = Column(String, nullable=False, index=True)
    content = Column(Text, nullable=False, default="")
    excerpt = Column(Text, nullable=True)
    status = Column(String, nullable=True, default="draft")
    featured = Column(Boolean, nullable=True, default=False)
    featured_image = Column(String, nullable=True)
    tags = Column(JSON, nullable=True)
    meta_title = Column(String, nullable=True)
    meta_description = Column(String, nullable=True)
    reading_time = Column(Integer, nullable=True)
    author_id = Column(String, ForeignKey("authors.id"), nullable=True)
    category_id = Column(String, ForeignKey("blog_categories.id"), nullable=True)
    published_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<BlogPost(slug='{self.slug}', status='{self.status}')>"


# ===== LEADS =====

class Enquiry(Base):
    """
    Booking enquiry raised from a package or group tour page
    """
    __tablename__ = "enquiries"

    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    destination = Column(String, nullable=True)
    message = Column(Text, nullable=True)
    travel_date = Column(String, nullable=True)
    travelers = Column(Integer, nullable=True)
    source = Column(String, nullable=False, default="website")
    source_id = Column(String, nullable=True)
    status = Column(String, nullable=True, default="new")
    priority = Column(String, nullable=True, default="medium")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ContactSubmission(Base):
    """
    Contact-us form submission
    """
    __tablename__ = "contact_submissions"

    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    subject = Column(String, nullable=True)
    message = Column(Text, nullable=False)
    status = Column(String, nullable=True, default="new")
    created_at = Column(DateTime, default=datetime.utcnow)


# ===== GROUP TOURS =====

class GroupTourCategory(Base):
    __tablename__ = "group_tour_categories"

    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    icon = Column(String, nullable=True)
    color = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class GroupTour(Base):
    """
    Scheduled group departure with a fixed number of places
    """
    __tablename__ = "group_tours"

    id = Column(String, primary_key=True, default=_uuid)
    title = Column(String, nullable=False)
    destination = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(String, nullable=False)
    start_date = Column(String, nullable=False, index=True)
    end_date = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    original_price = Column(Float, nullable=True)
    currency = Column(String, nullable=True, default="USD")
    max_participants = Column(Integer, nullable=False)
    available_spots = Column(Integer, nullable=False)
    status = Column(String, nullable=True, default="active")
    featured = Column(Boolean, nullable=True, default=False)
    image_url = Column(String, nullable=True)
    highlights = Column(JSON, nullable=True)
    itinerary = Column(JSON, nullable=True)
    category_id = Column(String, ForeignKey("group_tour_categories.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<GroupTour(title='{self.title}', start_date='{self.start_date}')>"


# ===== SEO =====

class SeoSettings(Base):
    """
    Head metadata for one page URL
    """
    __tablename__ = "seo_settings"

    id = Column(String, primary_key=True, default=_uuid)
    page_url = Column(String, nullable=False, unique=True, index=True)
    page_type = Column(String, nullable=False, default="custom")
    meta_title = Column(String, nullable=False)
    meta_description = Column(String, nullable=False)
    meta_keywords = Column(String, nullable=True)
    canonical_url = Column(String, nullable=True)
    og_title = Column(String, nullable=True)
    og_description = Column(String, nullable=True)
    og_image = Column(String, nullable=True)
    structured_data = Column(JSON, nullable=True)
    robots_meta = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<SeoSettings(page_url='{self.page_url}', active={self.is_active})>"


MODELS_BY_TABLE = {
    model.__tablename__: model
    for model in (
        Package, Country, Content, BlogCategory, Author, BlogPost,
        Enquiry, ContactSubmission, GroupTourCategory, GroupTour, SeoSettings,
    )
}
