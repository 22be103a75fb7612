"""
Translation Module
==================

Translates dashboard text into the supported regional languages through
an external translation API.
"""
