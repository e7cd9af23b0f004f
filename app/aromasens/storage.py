import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .log import get_logger
from .models import ChatSession, Perfume, Recommendation

logger = get_logger(__name__)


class Storage(ABC):
    """Perfume catalog plus the sessions and recommendations created at recommendation time."""

    @abstractmethod
    def list_perfumes(self) -> List[Perfume]: ...

    @abstractmethod
    def get_perfumes(self, gender: str) -> List[Perfume]: ...

    @abstractmethod
    def get_perfume(self, perfume_id: int) -> Optional[Perfume]: ...

    @abstractmethod
    def create_perfume(self, perfume: Perfume) -> Perfume: ...

    @abstractmethod
    def create_chat_session(self, session: ChatSession) -> ChatSession: ...

    @abstractmethod
    def get_chat_session(self, session_id: int) -> Optional[ChatSession]: ...

    @abstractmethod
    def create_recommendation(self, recommendation: Recommendation) -> Recommendation: ...

    @abstractmethod
    def get_recommendations_by_session(self, session_id: int) -> List[Recommendation]: ...


class MemStorage(Storage):
    """In-process store. Ids start at 1 and are allocated under a lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._perfumes: Dict[int, Perfume] = {}
        self._sessions: Dict[int, ChatSession] = {}
        self._recommendations: Dict[int, Recommendation] = {}
        self._next_perfume_id = 1
        self._next_session_id = 1
        self._next_recommendation_id = 1

    def list_perfumes(self) -> List[Perfume]:
        with self._lock:
            return [self._perfumes[k] for k in sorted(self._perfumes)]

    def get_perfumes(self, gender: str) -> List[Perfume]:
        gender = (gender or "").strip().lower()
        return [p for p in self.list_perfumes() if p.gender == gender]

    def get_perfume(self, perfume_id: int) -> Optional[Perfume]:
        with self._lock:
            return self._perfumes.get(perfume_id)

    def create_perfume(self, perfume: Perfume) -> Perfume:
        with self._lock:
            perfume = perfume.model_copy(update={"id": self._next_perfume_id, "gender": perfume.gender.lower()})
            self._perfumes[perfume.id] = perfume
            self._next_perfume_id += 1
        return perfume

    def create_chat_session(self, session: ChatSession) -> ChatSession:
        with self._lock:
            session = session.model_copy(update={"id": self._next_session_id})
            self._sessions[session.id] = session
            self._next_session_id += 1
        logger.info(f"Created chat session {session.id} ({session.gender})")
        return session

    def get_chat_session(self, session_id: int) -> Optional[ChatSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def create_recommendation(self, recommendation: Recommendation) -> Recommendation:
        with self._lock:
            recommendation = recommendation.model_copy(update={"id": self._next_recommendation_id})
            self._recommendations[recommendation.id] = recommendation
            self._next_recommendation_id += 1
        logger.info(
            f"Stored recommendation {recommendation.id}: perfume {recommendation.perfume_id} "
            f"for session {recommendation.chat_session_id}"
        )
        return recommendation

    def get_recommendations_by_session(self, session_id: int) -> List[Recommendation]:
        with self._lock:
            return [r for r in self._recommendations.values() if r.chat_session_id == session_id]
