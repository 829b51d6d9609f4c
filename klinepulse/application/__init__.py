"""Application layer: puertos y servicios de orquestación."""
