"""ingestion package: chain data sources."""
