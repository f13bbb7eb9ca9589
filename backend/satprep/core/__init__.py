"""
Core module for application configuration and utilities.

Nothing is imported at package level: the client-side session package uses
graceful_failure without needing server settings, and satprep.models imports
datetime_utils from here. Import submodules directly, e.g.
from satprep.core.config import settings
"""
