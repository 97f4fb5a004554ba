"""Client-side auth state, optionally persisted between runs."""

from pathlib import Path

import orjson
import structlog
from pydantic import ValidationError

from marketplace.accounts.schema import User
from marketplace.conf import settings

logger = structlog.get_logger(__name__)


class AuthStore:
    """Holds the logged-in user.

    Only `user` and `is_authenticated` are persisted (the `auth-storage`
    entry). `is_loading` and `is_hydrated` describe the current run.
    """

    def __init__(self, storage_path: str | Path | None = None) -> None:
        """Initialize the store.

        Args:
            storage_path: JSON file holding the persisted state. Defaults to
                settings.AUTH_STORAGE_PATH; when empty, nothing is persisted.
        """
        path = storage_path if storage_path is not None else settings.AUTH_STORAGE_PATH
        self.storage_path = Path(path) if path else None
        self.user: User | None = None
        self.is_authenticated = False
        self.is_loading = True
        self.is_hydrated = False

    def set_user(self, user: User | None) -> None:
        self.user = user
        self.is_authenticated = user is not None
        self.is_loading = False
        self._persist()

    def set_loading(self, loading: bool) -> None:
        self.is_loading = loading

    def logout(self) -> None:
        """Clear the state and remove the persisted copy."""
        self.clear_auth()
        if self.storage_path is not None:
            self.storage_path.unlink(missing_ok=True)

    def clear_auth(self) -> None:
        """Clear the in-memory state only."""
        self.user = None
        self.is_authenticated = False
        self.is_loading = False

    def hydrate(self) -> None:
        """Load the persisted state, if any, and mark the store hydrated."""
        if self.storage_path is not None and self.storage_path.exists():
            try:
                state = orjson.loads(self.storage_path.read_bytes())
                user = state.get("user")
                self.user = User.model_validate(user) if user else None
                self.is_authenticated = bool(state.get("isAuthenticated")) and self.user is not None
            except (orjson.JSONDecodeError, ValidationError, AttributeError):
                logger.warning("auth_storage_unreadable", path=str(self.storage_path))
                self.user = None
                self.is_authenticated = False
        self.is_hydrated = True

    def _persist(self) -> None:
        if self.storage_path is None:
            return
        state = {
            "user": self.user.model_dump(mode="json", by_alias=True) if self.user else None,
            "isAuthenticated": self.is_authenticated,
        }
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        self.storage_path.write_bytes(orjson.dumps(state))
