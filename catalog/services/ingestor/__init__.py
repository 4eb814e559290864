"""Broker reference-data download and ingestion."""
