"""
API route modules
"""
