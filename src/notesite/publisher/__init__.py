"""Static HTML site publishing."""

from .generator import EntryData, PublishConfig, SiteGenerator

__all__ = ["EntryData", "PublishConfig", "SiteGenerator"]
