"""
infrastructure - Concrete implementations of domain ports.

Contains all vendor-specific code: SQLite, LangChain, OAuth HTTP clients.
Depends on domain/ only (implements ports). application/ reaches in here
for the built-in demo catalog and nothing else.
"""
