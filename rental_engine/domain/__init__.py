"""Capa de dominio: entidades, value objects, precios y ciclo de vida."""
