from __future__ import annotations


class Unauthenticated(PermissionError):
    pass


class NotFound(LookupError):
    pass


class SeedInputError(TypeError):
    pass
