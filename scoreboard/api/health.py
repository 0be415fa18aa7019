"""
Health check and system status endpoints
"""
from fastapi import APIRouter

from scoreboard import state


router = APIRouter(tags=["health"])


@router.get("/")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "message": "Scoreboard Registration Server",
        "version": "1.0.0",
        "store": type(state.STORE).__name__ if state.STORE else None,
        "active_sessions": len(state.SESSIONS.sessions),
    }
