from modbase.repositories.base import BaseRepository
from modbase.repositories.filters import FilterBuilder
from modbase.repositories.relationships import Relationship, SyncResult

__all__ = ["BaseRepository", "FilterBuilder", "Relationship", "SyncResult"]
