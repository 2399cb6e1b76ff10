"""Motor de ciclo de vida y precios de rentas de vehículos."""

__version__ = "1.0.0"
