"""
Album API — JSON Response Class
================================

What:  The response class used for every body the API writes.
How:   Starlette's compact JSON encoding followed by a single newline, so
       `{"message":"Hello World"}` goes out as `{"message":"Hello World"}\n`.
"""

from typing import Any

from fastapi.responses import JSONResponse


class NewlineJSONResponse(JSONResponse):
    media_type = "application/json"

    def render(self, content: Any) -> bytes:
        return super().render(content) + b"\n"
