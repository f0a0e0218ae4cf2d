"""Core command infrastructure."""
