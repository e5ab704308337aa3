"""
Dashboard session state and domain errors.
"""
