"""
Configuration rules: common checks, application-specific checks and the
registry that selects them per application.
"""
