"""clisession -- Interactive command sessions over a single connection.

This package implements the session side of a remote command line: it
reads command lines from a connected terminal, dispatches them to
pluggable command handlers, keeps paged ("cursored") output alive across
commands, and enforces session lifetime and idle expiration.
"""

__version__ = "0.1.0"
