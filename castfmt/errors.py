class CastError(Exception):
    pass


class FormatError(CastError, ValueError):
    """The stream is not a valid cast file."""


class UnsupportedPropertyKind(FormatError):
    def __init__(self, kind):
        shown = f"{kind:#x}" if isinstance(kind, int) else repr(kind)
        super().__init__(f"Unsupported property kind: {shown}")
        self.kind = kind


class TypeMismatch(CastError, TypeError):
    """A property was read as a kind other than the one it is stored as."""


class NotFound(CastError, KeyError):
    def __str__(self):
        return str(self.args[0]) if self.args else ""


class EmptyValues(CastError, ValueError):
    pass
