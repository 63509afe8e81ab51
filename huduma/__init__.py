"""
Huduma: local services marketplace backend.

Job-scoped chat, job lifecycle push notifications and the supporting
resources (users, jobs, payments, reviews, favorites).
"""

__version__ = "0.3.0"
