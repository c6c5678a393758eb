from __future__ import annotations

from fastapi import HTTPException, Request, status

from app.modules.study.state import StudySession


def get_study_session(request: Request) -> StudySession:
    """Resolve the process-wide study session created during app startup."""
    session = getattr(request.app.state, "study_session", None)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Study session not initialized",
        )
    return session
