from typing import Final

DEFAULT_SCOPE_SUFFIX: Final[str] = "/.default"


def scope_from_resource(resource: str) -> str:
    """Turn a v1 resource identifier into a v2 ``.default`` scope."""
    if resource.endswith(DEFAULT_SCOPE_SUFFIX):
        return resource
    return f"{resource.rstrip('/')}{DEFAULT_SCOPE_SUFFIX}"


def resource_from_scope(scope: str) -> str:
    """Strip the ``/.default`` suffix from a scope, if present."""
    if scope.endswith(DEFAULT_SCOPE_SUFFIX):
        return scope[: -len(DEFAULT_SCOPE_SUFFIX)]
    return scope
