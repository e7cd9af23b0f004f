from typing import Optional


class AromasensError(Exception):
    """Base class for errors raised by the recommendation service."""


class InvalidInputError(AromasensError):
    """Request data failed validation before any backend call was made."""


class ProviderError(AromasensError):
    def __init__(self, provider_id: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"[{provider_id}] {message}")
        self.provider_id = provider_id
        self.cause = cause


class ProviderNotConfiguredError(ProviderError):
    pass


class CatalogEmptyError(AromasensError):
    pass


class PerfumeNotFoundError(AromasensError):
    def __init__(self, perfume_id: int):
        super().__init__(f"Perfume not found: {perfume_id}")
        self.perfume_id = perfume_id


class SessionNotFoundError(AromasensError):
    def __init__(self, session_id: int):
        super().__init__(f"Chat session not found: {session_id}")
        self.session_id = session_id
