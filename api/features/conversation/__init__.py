"""Conversation feature package: entities, repository, service, controller and router.

Stores conversations and their messages with SQLAlchemy. Each conversation
lives in one of the configured spaces.
"""
