"""Tools bundled with chatview."""

from datetime import datetime
from typing import Any

from .base import BaseTool


class CurrentDateTimeTool(BaseTool):
    """Tells the model the current local date and time."""

    @property
    def name(self) -> str:
        return "get_date_and_time"

    @property
    def description(self) -> str:
        return "Returns the current date and time"

    @property
    def parameters_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}, "required": []}

    async def call(self, parameters: dict[str, Any]) -> Any:
        return {"date": datetime.now().strftime("%b %d, %Y at %I:%M:%S %p")}
