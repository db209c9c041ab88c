"""Row ingestion and normalisation."""
