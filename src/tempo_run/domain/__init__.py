"""Domain layer: pace estimation, tempo enrichment, queue selection and run sessions."""
