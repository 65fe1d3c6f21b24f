"""
Model Package Initialization
============================

Ensures models are properly registered when imported by the application.

All SQLAlchemy ORM models are exported from this module.

Usage:
    from app.models import Client, Vehicle, Role
"""

from .role_enum import Role
from .profile import UserProfile
from .lookup import Assistance, Coverage, EntityType, Insurer, VehicleModel
from .client import Client, DriverLicense
from .organization import Organization, OrganizationMember
from .vehicle import Vehicle, VehicleDriver
from .policy import InsurancePolicy, policy_assistances, policy_coverages
from .document import Document

__all__ = [
    "Role",
    "UserProfile",
    "Assistance",
    "Coverage",
    "EntityType",
    "Insurer",
    "VehicleModel",
    "Client",
    "DriverLicense",
    "Organization",
    "OrganizationMember",
    "Vehicle",
    "VehicleDriver",
    "InsurancePolicy",
    "policy_assistances",
    "policy_coverages",
    "Document",
]
