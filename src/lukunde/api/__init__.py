"""FastAPI server for Lukunde."""

from .app import create_app, get_workspace
from .workspace import Workspace

__all__ = ["create_app", "get_workspace", "Workspace"]
