"""Exception hierarchy for infrakit.

Every fatal condition of a setup run derives from ``SetupError`` so the CLI
can report it with a single handler and exit non-zero.
"""

from __future__ import annotations


class SetupError(Exception):
    """Base class for errors that abort a setup run."""


class RegistryError(SetupError):
    """Raised when the component catalog itself is malformed."""


class UnknownComponentError(SetupError):
    """Raised when one or more component ids are not in the registry."""

    def __init__(self, invalid: list[str]) -> None:
        self.invalid = list(invalid)
        super().__init__(f"Invalid components: {' '.join(self.invalid)}")


class DependencyCycleError(SetupError):
    """Raised when a component's dependency chain loops back on itself."""

    def __init__(self, chain: list[str]) -> None:
        self.chain = list(chain)
        super().__init__(f"Dependency cycle detected: {' -> '.join(self.chain)}")


class MissingPluginError(SetupError):
    """Raised by plugin lookup when a component has no plugin.

    The assembler treats this as a warning and skips the component.
    """

    def __init__(self, component: str) -> None:
        self.component = component
        super().__init__(f"Setup plugin not found for {component}")


class WorkspaceIOError(SetupError):
    """Raised when creating, removing or copying workspace files fails."""


class EnvironmentSeedMissingError(SetupError):
    """Raised when the environment template needed to seed ``.env`` is absent."""


class ManifestValidationError(SetupError):
    """Raised when the assembled manifest is not a well-formed compose file."""
