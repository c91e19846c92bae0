from forkflow.routers.forking import router as forking_router

__all__ = ["forking_router"]
