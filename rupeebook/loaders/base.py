# rupeebook/loaders/base.py
from abc import ABC, abstractmethod


class BaseLoader(ABC):
    def __init__(self, config=None):
        self.config = config or {}

    @abstractmethod
    def load(self, file_path: str, **options):
        """
        Read file_path and return what it holds: a Ledger for book
        snapshots, a list of Transaction instances for entry sheets.
        """
        pass
