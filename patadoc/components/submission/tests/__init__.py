"""
Submission component tests.
"""
