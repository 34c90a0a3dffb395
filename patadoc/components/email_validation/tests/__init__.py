"""
Email validation component tests.
"""
