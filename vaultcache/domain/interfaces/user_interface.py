"""Interface for presenting cache results to the user.

Defines the contract for displaying values, item details, errors, warnings
and informational messages, allowing different UI implementations.
"""

import abc
from typing import Any, Dict


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_output(self, output: str, **kwargs: Any) -> None:
        """Displays a cached value or command result.

        Args:
            output: The text to display.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_details(self, title: str, details: Dict[str, Any]) -> None:
        """Displays a set of labelled fields (e.g. the metadata of an entry)."""
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        pass
