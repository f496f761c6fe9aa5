"""GreenPass - sustainability data quality, circularity and audit service."""
