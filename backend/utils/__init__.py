"""
Utils package for the gallery backend
"""
from .helpers import (
    utc_now_iso,
    generate_random_string,
    generate_photo_id,
    normalize_slug,
    unique_ids,
    parse_id_csv,
    format_file_size,
)

__all__ = [
    'utc_now_iso',
    'generate_random_string',
    'generate_photo_id',
    'normalize_slug',
    'unique_ids',
    'parse_id_csv',
    'format_file_size',
]
