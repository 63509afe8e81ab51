"""
Notifications domain.
Job lifecycle pushes to participants.
"""
