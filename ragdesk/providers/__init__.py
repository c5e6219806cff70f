"""Concrete adapters for the contracts in :mod:`ragdesk.interfaces`."""
