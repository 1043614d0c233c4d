from __future__ import annotations


class PosError(Exception):
    pass


class CatalogError(PosError, ValueError):
    pass


class CartError(PosError, KeyError):
    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class RenderError(PosError, ValueError):
    pass


class SinkError(PosError):
    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message)
        self.retryable = retryable
