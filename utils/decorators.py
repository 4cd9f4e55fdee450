"""View decorators that bind a request to its browser session's workspace."""
from functools import wraps

from flask import g, session

from extensions import workspaces
from utils.security import generate_token
from utils.workspace import Workspace

SESSION_KEY = "workspace_id"


def current_workspace() -> Workspace:
    workspace_id = session.get(SESSION_KEY)
    if not workspace_id:
        workspace_id = generate_token(16)
        session[SESSION_KEY] = workspace_id
        session.permanent = True
    g.workspace_id = workspace_id
    workspaces.expire_idle()
    return workspaces.get_or_create(workspace_id)


def with_workspace(locked: bool = True):
    """Pass the caller's workspace as the first view argument.

    With ``locked`` the whole view runs under the workspace lock; views that
    block on the network take the lock themselves around each mutation.
    """

    def decorator(view_func):
        @wraps(view_func)
        def wrapped(*args, **kwargs):
            workspace = current_workspace()
            if not locked:
                return view_func(workspace, *args, **kwargs)
            with workspace.lock:
                return view_func(workspace, *args, **kwargs)

        return wrapped

    return decorator
