from .resolution import LinkNotFound, resolve_link
from .navigation import NavigationController
from .scheduler import DebouncedTask
from .session import NoteSession, SessionState
from .workspace import Workspace

__all__ = ["LinkNotFound",
           "resolve_link",
           "NavigationController",
           "DebouncedTask",
           "NoteSession",
           "SessionState",
           "Workspace",
           ]
