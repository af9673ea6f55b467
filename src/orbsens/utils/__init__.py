"""
Constants and analytic reference solutions.
"""
