"""Operator CLI for the EdgeX Influx ingest service; the typer app lives in ``cli.app``."""
