"""Top-level package for faxsync."""

__version__ = "0.1.0"

from .config import AccountConfig, AppConfig, load_accounts, load_config
from .scheduler import CycleScheduler, build_scheduler
from .worker import AccountWorker, CycleReport

__all__ = [
    "AccountConfig",
    "AccountWorker",
    "AppConfig",
    "CycleReport",
    "CycleScheduler",
    "__version__",
    "build_scheduler",
    "load_accounts",
    "load_config",
]
