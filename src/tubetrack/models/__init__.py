"""Pydantic domain models for Tubetrack."""
