# Collaboration Platform Routers Module
# Exports all modular API routers

from routers.collaborations import router as collaborations_router
from routers.contracts import router as contracts_router
from routers.admin_collaborations import router as admin_collaborations_router
from routers.notifications import router as notifications_router

__all__ = [
    'collaborations_router',
    'contracts_router',
    'admin_collaborations_router',
    'notifications_router',
]
