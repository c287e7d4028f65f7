"""
Album API — Root Route
=======================

What:  GET / greeting. Unmatched paths are answered by the HTTPException
       handler in main.py with {"message": "404 Not Found"}.
"""

from typing import Dict

from fastapi import APIRouter

router = APIRouter(tags=["Root"])


@router.get("/", summary="Greeting")
async def hello_world() -> Dict[str, str]:
    return {"message": "Hello World"}
