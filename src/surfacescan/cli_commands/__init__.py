"""Typer command modules registered on the shared SurfaceScan app."""
