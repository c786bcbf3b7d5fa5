from .deps import state, get_state, init_state, AppState, require_router
from .status import router as status_router
from .classify import router as classify_router

__all__ = [

    'state',
    'get_state',
    'init_state',
    'AppState',
    'require_router',
    'status_router',
    'classify_router',
]
