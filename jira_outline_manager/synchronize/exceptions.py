"""Contains exceptions raised when a local precondition of an action is not met."""

from jira_outline_manager.synchronize.models import ItemKind


class OutlineActionError(Exception):
    """Base class for errors that abort an action before anything is sent to JIRA."""

    pass


class HeadingNotFoundError(OutlineActionError):
    """Raised when a locator does not match any heading."""

    def __init__(self, locator: str) -> None:
        """Initializes the exception with the locator that matched nothing."""
        super().__init__(f"No heading found for {locator!r}")
        self.locator = locator


class UnsupportedItemKindError(OutlineActionError):
    """Raised when an action is invoked on a heading of the wrong kind."""

    def __init__(self, action: str, kind: ItemKind | None, title: str) -> None:
        """Initializes the exception with the action and the offending heading."""
        kind_name = kind.value if kind is not None else "unlinked heading"
        super().__init__(f"Cannot {action} on {kind_name} {title!r}")
        self.action = action
        self.kind = kind
        self.title = title


class NoActiveHeadingError(OutlineActionError):
    """Raised when an action needs the clocked-in heading but none is active."""

    pass


class MissingConfigurationError(OutlineActionError):
    """Raised when an action needs a sync setting that is not configured."""

    def __init__(self, name: str, hint: str = "") -> None:
        """Initializes the exception with the name of the missing setting."""
        super().__init__(f"Missing configuration: {name}" + (f" ({hint})" if hint else ""))
        self.name = name
