"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system.
"""

from grievance_cell.core.exceptions import (
    ApplicationException,
    DomainException,
    ComplaintStateException,
    RepositoryException,
    ValidationException,
    ResourceNotFoundException,
    PermissionDeniedException,
    ConfigurationException,
    ExternalServiceException,
    TranslationException,
)

__all__ = [
    "ApplicationException",
    "DomainException",
    "ComplaintStateException",
    "RepositoryException",
    "ValidationException",
    "ResourceNotFoundException",
    "PermissionDeniedException",
    "ConfigurationException",
    "ExternalServiceException",
    "TranslationException",
]
