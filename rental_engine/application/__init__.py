"""
Capa de Aplicación - Motor de rentas.

Esta capa contiene los casos de uso, DTOs e interfaces (puertos).
Orquesta la lógica de negocio y define los contratos con la infraestructura.

Estructura:
- use_cases/: Façade del ciclo de vida y reconciliación
- dtos/: Data Transfer Objects
- interfaces/: Puertos (contratos para adaptadores)
"""
