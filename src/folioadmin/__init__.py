"""
folioadmin - Admin back office for a personal portfolio site

Manages the media shown on the public site:
- Direct-to-storage uploads through signed URLs (Google Cloud Storage)
- WebP conversion and thumbnail generation for gallery and 360° photos
- JSON content indexes for gallery, 360° photos, videos and tours
- Session-protected JSON API (FastAPI) and admin panel (Streamlit)
"""

__version__ = "0.1.0"
__author__ = "folioadmin"
__description__ = "Admin back office for a personal portfolio site"
