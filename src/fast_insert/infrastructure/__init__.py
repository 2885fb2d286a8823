"""
Infrastructure Layer

Reusable services that support the loader without containing load policy
themselves.

Components:
- sql: MySQL statement generation (identifier quoting, LOAD DATA building)
"""
