"""Registry and Docker Hub operations."""
