"""Library for formatting output."""

from abc import ABC, abstractmethod
import json
import sys
from typing import Any, TextIO

import yaml


class StructFormatter(ABC):
    """A formatter that prints objects."""

    @abstractmethod
    def format(self, data: list[dict[str, Any]]) -> str:
        """Format the data objects."""

    def print(self, data: list[dict[str, Any]], file: TextIO = sys.stdout) -> None:
        """Print the data objects."""
        print(self.format(data), end="", file=file)


class YamlFormatter(StructFormatter):
    """A formatter that prints a stream of yaml documents."""

    def format(self, data: list[dict[str, Any]]) -> str:
        """Format the data objects."""
        return yaml.dump_all(data, sort_keys=False, explicit_start=True)


class JsonFormatter(StructFormatter):
    """A formatter that prints a json list."""

    def format(self, data: list[dict[str, Any]]) -> str:
        """Format the data objects."""
        return json.dumps(data, indent=4, sort_keys=False) + "\n"


FORMATTERS: dict[str, type[StructFormatter]] = {
    "yaml": YamlFormatter,
    "json": JsonFormatter,
}
