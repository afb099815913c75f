"""Database base class and model imports."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models here for Alembic to detect them
from apollusia.db.models.poll import Poll  # noqa: F401, E402
from apollusia.db.models.poll_event import PollEvent  # noqa: F401, E402
from apollusia.db.models.participant import Participant  # noqa: F401, E402
from apollusia.db.models.selection import Selection  # noqa: F401, E402
