from abc import ABC, abstractmethod


class LLMClient(ABC):
    """Text-generation collaborator used by the report generator.

    ``generate`` performs exactly one request and returns the raw text answer.
    Any failure (network, auth, timeout, quota) must surface as
    ``services.exceptions.ServiceError``.
    """

    @abstractmethod
    def generate(self, prompt: str, **kwargs) -> str: ...
