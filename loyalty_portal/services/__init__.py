"""
Business logic services for the loyalty portal.
"""
