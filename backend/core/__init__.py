# Core module exports
from .config import *
from .database import db, client, create_database_indexes
from .dependencies import get_current_user, security
from .errors import (
    GalleryError, Unauthorized, NotFound, Conflict,
    ValidationError, TransportError, InternalError,
)
