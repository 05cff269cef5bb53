"""Serviços de infraestrutura (hash de senha e JWT)."""
