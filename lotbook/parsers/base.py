# lotbook/parsers/base.py

from abc import ABC, abstractmethod
from typing import Dict, List

class BaseParser(ABC):
    @abstractmethod
    def sniff(self, path: str) -> Dict:
        """
        Returns metadata plus errors/warnings when the file does not match the format.
        Must be cheap (no full parse).
        """
        raise NotImplementedError

    @abstractmethod
    def parse(self, path: str) -> List[dict]:
        """
        Returns a list of normalised dicts.
        """
        raise NotImplementedError
