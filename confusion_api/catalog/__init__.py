"""Menu data: dishes, promotions, leaders, comments and favorites."""

from .store import DISHES, LEADERS, PROMOTIONS, Collection

__all__ = ["Collection", "DISHES", "LEADERS", "PROMOTIONS"]
