"""Value Object Customer - identidad del cliente de una renta."""

from dataclasses import dataclass

from rental_engine.domain.errors import ValidationError


@dataclass(frozen=True)
class Customer:
    """
    Datos del cliente copiados en cada solicitud y orden.

    Attributes:
        first_name: Nombre.
        last_name: Apellido.
        age: Edad en años.
        phone: Teléfono de contacto.
        email: Correo electrónico (opcional).
    """

    first_name: str
    last_name: str
    age: int
    phone: str
    email: str | None = None

    def __post_init__(self) -> None:
        for field_name in ("first_name", "last_name", "phone"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"customer.{field_name}", "es requerido")
            object.__setattr__(self, field_name, value.strip())

        if isinstance(self.age, bool) or not isinstance(self.age, int) or self.age <= 0:
            raise ValidationError("customer.age", "debe ser un entero positivo")

        if self.email is not None:
            email = self.email.strip()
            if not email:
                object.__setattr__(self, "email", None)
            elif "@" not in email:
                raise ValidationError("customer.email", f"formato inválido: {email}")
            else:
                object.__setattr__(self, "email", email)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
