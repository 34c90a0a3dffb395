"""
Waitlist component tests.
"""
