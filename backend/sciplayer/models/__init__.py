"""ORM Models: one file per table.

All models are imported here so Base.metadata is complete before create_all
or Alembic reads it.
"""

from sciplayer.models.device import Device  # noqa: F401
from sciplayer.models.playlist import Playlist  # noqa: F401
