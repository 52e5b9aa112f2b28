"""
Ingestion package: source adapters, HTTP client and the ingestion runner.
"""
