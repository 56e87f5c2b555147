from learnermax.health.router import router


__all__ = ["router"]
