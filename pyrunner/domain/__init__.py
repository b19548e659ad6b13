# -----------------------------------------------------------------------------
# DOMAIN LAYER
# -----------------------------------------------------------------------------
# Contains the Pydantic models passed between pipeline stages and the base
# error every stage raises.
# -----------------------------------------------------------------------------

from .errors import BootstrapError
from .models import (
    ApplicationProfile,
    LaunchCommand,
    ManifestSet,
    OriginKind,
    RuntimeCategory,
    ServerKind,
    SourceLocator,
)

__all__ = [
    "ApplicationProfile",
    "BootstrapError",
    "LaunchCommand",
    "ManifestSet",
    "OriginKind",
    "RuntimeCategory",
    "ServerKind",
    "SourceLocator",
]
