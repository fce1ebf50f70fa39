"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Report whether the routes table is reachable."""
    from ...db.supabase import get_supabase_client

    supabase = get_supabase_client()
    if not supabase:
        return {"configured": False, "reachable": False, "routes_count": 0}

    try:
        response = supabase.table("routes").select("id", count="exact").limit(1).execute()
    except Exception as exc:
        return {"configured": True, "reachable": False, "error": str(exc)}
    return {"configured": True, "reachable": True, "routes_count": response.count or 0}
