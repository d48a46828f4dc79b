# rupeebook/outputs/base.py
import os
from abc import ABC, abstractmethod

from rupeebook.core.models import ReportSettings


class BaseOutput(ABC):
    def __init__(self, config):
        self.config = config
        self.output_dir = config.get('output_dir', 'reports')
        self.settings = ReportSettings.from_config(config)
        os.makedirs(self.output_dir, exist_ok=True)

    @abstractmethod
    def write(self, report, generated_by=""):
        """Write the report to the chosen sink and return the path written."""
        pass
