"""Routing — longest-prefix content table with an embedded-directory tier.

Routes are registered during setup and frozen before the listener
starts serving.
"""

from positron.routing.route import EmbeddedDirectory, Route
from positron.routing.router import Router

__all__ = ["EmbeddedDirectory", "Route", "Router"]
