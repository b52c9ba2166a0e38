"""Services: AI backends, the processing pipeline and storage."""
