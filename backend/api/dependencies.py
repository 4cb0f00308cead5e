"""Shared dependencies for API routes."""

from services.feedback_store import FeedbackStore, get_store


def get_feedback_store() -> FeedbackStore:
    return get_store()
