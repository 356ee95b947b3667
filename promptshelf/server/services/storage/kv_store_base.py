from abc import ABC, abstractmethod
from typing import Optional


class BaseKeyValueStore(ABC):
    """
    Base class for the string key-value storage backing one browser profile

    Implementations may raise StorageError from get and set; the stores built
    on top of them decide how to recover.
    """

    def __init__(self, profile_id: str):
        self.profile_id = profile_id

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the raw value stored under a key.

        Args:
            key (str): Storage key

        Returns:
            Optional[str]: The stored value, None when the key was never written
        """
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Overwrite the raw value stored under a key.

        Args:
            key (str): Storage key
            value (str): Serialized value
        """
        raise NotImplementedError
