"""
Tribunal - Services Package
===========================

Long-lived services owned by the bot.
"""
