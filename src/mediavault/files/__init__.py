from .lifecycle import FileLifecycleManager
from .models import Category, FilePatch, FileRecord, FileStats, FileType, IncomingFile, UploadForm
from .repository import FileFilter, FileRepository, MongoFileRepository

__all__ = [
    "Category",
    "FileFilter",
    "FileLifecycleManager",
    "FilePatch",
    "FileRecord",
    "FileRepository",
    "FileStats",
    "FileType",
    "IncomingFile",
    "MongoFileRepository",
    "UploadForm",
]
