import logging
import threading
import time
import uuid
from typing import Callable, Dict, List, Optional

from reqdef import config
from reqdef.graph.errors import NotFound
from reqdef.nodes.registry import NodeTypeRegistry, get_node_registry
from reqdef.session.context import DesignContext

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Holds the design contexts of live sessions.

    The store is created by the application and handed to request
    handlers; contexts never reach each other through module state.
    A context idle for longer than `idle_timeout` seconds is dropped by
    the next sweep; sweeps run on create() and get(). A timeout of 0
    keeps sessions until they are dropped explicitly.
    """

    def __init__(
        self,
        registry: Optional[NodeTypeRegistry] = None,
        idle_timeout: float = config.SESSION_IDLE_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.registry = registry or get_node_registry()
        self.idle_timeout = idle_timeout
        self.clock = clock
        self._contexts: Dict[str, DesignContext] = {}
        self._lock = threading.Lock()

    def create(self, session_id: Optional[str] = None) -> DesignContext:
        session_id = session_id or uuid.uuid4().hex
        with self._lock:
            self._sweep()
            if session_id in self._contexts:
                raise ValueError(f"Session '{session_id}' already exists")
            context = DesignContext(session_id=session_id, registry=self.registry)
            context.last_access = self.clock()
            self._contexts[session_id] = context
        logger.debug("[SessionStore] Created session %s", session_id)
        return context

    def get(self, session_id: str) -> DesignContext:
        with self._lock:
            self._sweep()
            context = self._contexts.get(session_id)
            if context is None:
                raise NotFound(f"Session '{session_id}' does not exist")
            context.last_access = self.clock()
        return context

    def drop(self, session_id: str) -> None:
        with self._lock:
            context = self._contexts.pop(session_id, None)
        if context is None:
            raise NotFound(f"Session '{session_id}' does not exist")
        context.cleanup_workspace()

    def sweep(self) -> List[str]:
        """Drop idle sessions now; returns the dropped ids."""
        with self._lock:
            return self._sweep()

    def _sweep(self) -> List[str]:
        if self.idle_timeout <= 0:
            return []
        deadline = self.clock() - self.idle_timeout
        expired = [sid for sid, ctx in self._contexts.items() if ctx.last_access < deadline]
        for session_id in expired:
            self._contexts.pop(session_id).cleanup_workspace()
        if expired:
            logger.info("[SessionStore] Expired %d idle sessions", len(expired))
        return expired

    def list_ids(self) -> List[str]:
        with self._lock:
            return list(self._contexts)

    def __len__(self) -> int:
        return len(self._contexts)
