"""Entidades e regras de domínio."""
