"""Identifier generation for messages, tasks and artifacts."""

from cuid2 import cuid_wrapper

cuid = cuid_wrapper()
