from reqdef.session.context import DesignContext
from reqdef.session.store import SessionStore

__all__ = ["DesignContext", "SessionStore"]
