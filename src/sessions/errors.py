class SessionStoreError(Exception):
    """Raised when the session store cannot be read or written."""
