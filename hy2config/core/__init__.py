from hy2config.core.context import AppContext, get_context, init_context

__all__ = [
    "AppContext",
    "get_context",
    "init_context",
]
