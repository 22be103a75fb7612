"""
Users Module
============

Staff and student profiles with their organizational role.

Identity (sign-in, tokens) is handled by the external identity provider;
this module only keeps the profile and role used for routing dashboards.
"""
