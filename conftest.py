"""
Root pytest configuration.

Declares pytest plugins at the root level, which pytest 8.x+ requires for
consistent plugin loading across all test directories.
"""

pytest_plugins = ("pytest_asyncio",)
