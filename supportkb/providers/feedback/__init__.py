"""Feedback persistence providers (customer ratings of chat sessions).

SQLiteFeedbackProvider stores 1-5 ratings in data/feedback.db and reports
the count, mean and per-value histogram for the admin dashboard.
"""

from supportkb.providers.feedback.sqlite_feedback_provider import SQLiteFeedbackProvider

__all__ = ["SQLiteFeedbackProvider"]
