from .archive import AnalysisArchive
from .db import Database, normalized_database_url
from .models import Base, JudgeComment

__all__ = ["AnalysisArchive", "Database", "normalized_database_url", "Base", "JudgeComment"]
