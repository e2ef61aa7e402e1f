"""Core package for the devbase project."""

__version__ = "0.1.0"

from .catalog import RepositoryCatalog
from .cli import app, run
from .config import Config, ConfigError, Settings
from .errors import (
    DevbaseError,
    DuplicatePath,
    DuplicateTag,
    HealthUnavailable,
    InvalidDepth,
    InvalidPath,
    InvalidTag,
    NotFound,
    ScanError,
)
from .health import classify
from .manager import DevbaseManager
from .models import (
    CommitLogEntry,
    DiscoveredRepo,
    RefreshReport,
    RepositoryHealth,
    RepositoryInfo,
    RepositoryStatus,
    ScanPath,
    ScanReport,
    Tag,
)
from .orchestrator import ScanOrchestrator
from .query import RepositoryQuery, filter_repositories
from .registry import ScanPathRegistry
from .tags import TagRegistry

__all__ = [
    "__version__",
    "Config",
    "ConfigError",
    "Settings",
    "DevbaseManager",
    "DevbaseError",
    "DuplicatePath",
    "DuplicateTag",
    "HealthUnavailable",
    "InvalidDepth",
    "InvalidPath",
    "InvalidTag",
    "NotFound",
    "ScanError",
    "CommitLogEntry",
    "DiscoveredRepo",
    "RefreshReport",
    "RepositoryHealth",
    "RepositoryInfo",
    "RepositoryStatus",
    "ScanPath",
    "ScanReport",
    "Tag",
    "RepositoryCatalog",
    "ScanOrchestrator",
    "ScanPathRegistry",
    "TagRegistry",
    "RepositoryQuery",
    "classify",
    "filter_repositories",
    "app",
    "run",
]
