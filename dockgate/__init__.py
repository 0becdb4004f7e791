"""Dockgate: resource-control filtering proxy for the Docker Engine API."""
