#roadit/services/photos.py
import uuid
import requests
from roadit.core.config import settings
from roadit.services.assessment import parse_photo_data_uri

EXTENSIONS = {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp", "image/gif": "gif"}

def upload_photo(photo_data_uri: str, folder: str) -> str:
    """Uploads to Supabase Storage via REST; returns public URL (bucket must be public).

    Without Supabase configured the data URI itself is kept as the photo URL.
    """
    content_type, data = parse_photo_data_uri(photo_data_uri)
    if not (settings.supabase_url and settings.supabase_service_role):
        return photo_data_uri.strip()
    path = make_object_key(folder, content_type)
    url = f"{settings.supabase_url}/storage/v1/object/{settings.supabase_bucket}/{path}"
    r = requests.post(url, headers={
        "Authorization": f"Bearer {settings.supabase_service_role}",
        "Content-Type": content_type,
        "x-upsert": "true",
    }, data=data, timeout=settings.remote_timeout_seconds)
    r.raise_for_status()
    # public URL pattern:
    return f"{settings.supabase_url}/storage/v1/object/public/{settings.supabase_bucket}/{path}"

def make_object_key(folder: str, content_type: str) -> str:
    ext = EXTENSIONS.get(content_type, content_type.rsplit("/", 1)[-1] or "jpg")
    return f"{folder}/{uuid.uuid4().hex}.{ext}"
