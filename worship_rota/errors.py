"""Exceptions raised by the rota package."""


class UnknownIdError(KeyError):
    """A member, event or slot id that the roster does not hold."""

    def __init__(self, kind: str, item_id: str):
        super().__init__(f"Unknown {kind} id: {item_id}")
        self.kind = kind
        self.item_id = item_id

    def __str__(self):
        return self.args[0]


class PublishError(ValueError):
    """An event cannot be turned into a publishing payload."""
