"""adpath - Create the missing organizational units of an Active Directory path."""

# Version is read from package metadata (set in setup.py)
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("adpath")
except PackageNotFoundError:
    # Package not installed (development mode)
    __version__ = "0.0.0-dev"

from .cli import main
from .services import PathMaterializer, PathService, materialize

__all__ = ["main", "PathMaterializer", "PathService", "materialize", "__version__"]
