from huduma.api.routes import favorites, jobs, messages, payments, reviews, users, ws

__all__ = [
    "favorites",
    "jobs",
    "messages",
    "payments",
    "reviews",
    "users",
    "ws",
]
