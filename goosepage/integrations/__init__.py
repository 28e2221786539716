from goosepage.integrations.fastapi import (
    CursorParams,
    KeysetPageResponse,
    init_app,
    register_exception_handlers,
)

__all__ = [
    "CursorParams",
    "KeysetPageResponse",
    "init_app",
    "register_exception_handlers",
]
