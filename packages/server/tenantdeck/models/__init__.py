# SQLModel definitions: imported here so Alembic sees the full metadata.
from .base import UUIDMixin, CreatedAtMixin, TimestampMixin  # noqa: F401
from .organization import Organization  # noqa: F401
from .user import User  # noqa: F401
from .member import Member  # noqa: F401
from .invitation import Invitation  # noqa: F401
from .project import Project  # noqa: F401
