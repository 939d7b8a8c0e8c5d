"""Exception taxonomy for the ingestion pipeline."""

from __future__ import annotations


class IngestionError(Exception):
    """Base exception for pipeline failures."""


class ResourceUnavailableError(IngestionError):
    pass


class ConversionError(IngestionError):
    pass


class ExternalServiceError(IngestionError):
    pass


class ServiceNotFoundError(IngestionError):
    def __init__(self, service: str):
        super().__init__(f"{service} service not found")
        self.service = service
