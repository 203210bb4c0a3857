"""
Utility helper functions for the gallery backend
"""
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Iterable, List, Optional


# ============ Time Utilities ============

def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string (the stored timestamp format)"""
    return datetime.now(timezone.utc).isoformat()


# ============ Identifier Utilities ============

def generate_random_string(length: int = 32) -> str:
    """Generate a random alphanumeric string"""
    alphabet = string.ascii_letters + string.digits
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def generate_photo_id() -> str:
    """Photo ids are tg-<epoch ms>-<random suffix>"""
    return f"tg-{int(time.time() * 1000)}-{generate_random_string(6).lower()}"


def normalize_slug(slug: Optional[str]) -> Optional[str]:
    """Trim a slug; blank means no category"""
    if slug is None:
        return None
    slug = slug.strip()
    return slug or None


def unique_ids(ids: Iterable[str]) -> List[str]:
    """Drop blanks and duplicates, keeping first-seen order"""
    seen = set()
    result = []
    for raw in ids:
        value = (raw or "").strip()
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def parse_id_csv(value: Optional[str]) -> List[str]:
    """Split a comma-separated id list (?photoIds=a,b,c)"""
    if not value:
        return []
    return unique_ids(value.split(','))


# ============ String Utilities ============

def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format"""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} TB"
