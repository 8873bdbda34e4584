"""Reconciliation engine and .env.example regeneration."""
from .engine import analyze, reconcile
from .example_gen import generate_example_content

__all__ = ["analyze", "reconcile", "generate_example_content"]
