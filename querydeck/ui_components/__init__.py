from .buttons import SmallButton

__all__ = ["SmallButton"]
