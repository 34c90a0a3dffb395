"""
Rate limit component tests.
"""
