"""Command line interface for policynet."""
