"""
Core types and configuration for docauthz.
"""
