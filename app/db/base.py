# /classroom-ai-backend/app/db/base.py

# Central registry for all our SQLAlchemy models. Importing them here makes
# sure the Base class knows about them before `create_all` runs.

from .database import Base
from .models.kv_models import KVEntry
