"""Enumeration types for trip evidence data models."""

from enum import Enum


class SourceType(str, Enum):
    WEB = "web"
    FLIGHT = "flight"
    LODGING = "lodging"


class Intent(str, Enum):
    RETRIEVE_ONLY = "RETRIEVE_ONLY"
    SCRAPE_AND_UPDATE = "SCRAPE_AND_UPDATE"
    FULL_REPLAN = "FULL_REPLAN"
    PLAN_EDIT_ONLY = "PLAN_EDIT_ONLY"
