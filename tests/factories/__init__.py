"""Test factories."""

from tests.factories.office import MembershipFactory, OfficeSnapshotFactory
from tests.factories.user import ActorFactory


__all__ = ["ActorFactory", "MembershipFactory", "OfficeSnapshotFactory"]
