"""Infraestrutura: banco, logging, autenticação e middlewares."""
