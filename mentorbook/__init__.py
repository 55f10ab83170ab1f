"""
mentorbook - book mentorship sessions against recurring weekly availability.
"""

__version__ = "0.1.0"
