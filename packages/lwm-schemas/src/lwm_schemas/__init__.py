"""lwm-schemas: Pydantic schemas for the labwork workflow."""
