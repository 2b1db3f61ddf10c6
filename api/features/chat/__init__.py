"""Chat feature package: request builder, turn service, controller and router.

A turn is one user message in and one assistant message out, with a single
call to the completion provider in between.
"""
