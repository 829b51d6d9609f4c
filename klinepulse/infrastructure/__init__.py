"""Infrastructure layer: event bus y adaptadores externos."""
