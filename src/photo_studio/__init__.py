"""Photo Studio - booking, client gallery, invoicing and Instagram sync backend."""

__version__ = "0.1.0"
__author__ = "Photo Studio Team"
__description__ = "Backend for a photography studio website, admin CMS and client portal"

from .core.config import Config, get_config
from .core.logger import get_logger, setup_logging

__all__ = [
    'Config',
    'get_config',
    'get_logger',
    'setup_logging',
]
