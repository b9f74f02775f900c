"""Persistence layer - model gateways over reflected tables."""

from restforge.persistence.gateway import ModelGateway
from restforge.persistence.sql import Database, SqlGateway

__all__ = ["Database", "ModelGateway", "SqlGateway"]
