"""
Tribunal
========

Discord moderation bot where moderators vote on escalated reports and
the outcome is applied automatically.
"""

__version__ = "1.0.0"
