"""
Command-line interface for clustermatrix.

Provides typer-based CLI commands for exporting correlation matrices.
"""
