"""Presentation layer: API REST, WebSocket y formato de gráfico."""
