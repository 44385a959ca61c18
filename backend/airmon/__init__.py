"""Air Monitor backend: sensor ingestion, queries and account management."""
