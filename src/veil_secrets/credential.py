"""Credential - uma entrada de segredo derivada ou explícita."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Self

from .hasher import Hasher
from .utils import decode_bytes, encode_bytes, to_secret_bytes

DEFAULT_LENGTH = 128


@dataclass
class Credential:
    """Credencial identificada por (group, name).

    Sem valor explícito, o valor é derivado sob demanda pelo hasher a partir
    do caminho e da versão; apenas metadados são persistidos. Com valor
    explícito, ele é devolvido literalmente e a credencial nasce congelada.

    Attributes:
        name: Nome da credencial
        group: Grupo opcional
        length: Tamanho da saída derivada (indicativo para valores explícitos)
        version: Versão atual, incrementada a cada rotação
        frozen: Se True, rotações não alteram a credencial
        explicit_value: Valor explícito (str é convertido para UTF-8)
    """

    name: str
    group: Optional[str] = None
    length: int = DEFAULT_LENGTH
    version: int = 0
    frozen: Optional[bool] = None
    explicit_value: Optional[bytes] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Valida metadados e aplica a regra padrão de congelamento."""
        if not isinstance(self.length, int) or isinstance(self.length, bool) or self.length <= 0:
            raise ValueError(
                f"Tamanho da credencial '{self.path}' deve ser inteiro positivo, "
                f"recebido: {self.length!r}"
            )
        if not isinstance(self.version, int) or isinstance(self.version, bool) or self.version < 0:
            raise ValueError(
                f"Versão da credencial '{self.path}' deve ser inteiro não negativo, "
                f"recebido: {self.version!r}"
            )

        self.explicit_value = to_secret_bytes(self.explicit_value)
        if self.frozen is None:
            self.frozen = self.explicit_value is not None
        self.frozen = bool(self.frozen)

    @classmethod
    def from_dict(
        cls, name: str, data: Mapping[str, Any], group: Optional[str] = None
    ) -> Self:
        """Reconstrói a credencial a partir de to_dict(), sem recalcular nada."""
        value = data.get("value")
        return cls(
            name=name,
            group=group,
            length=data.get("length", DEFAULT_LENGTH),
            version=data.get("version", 0),
            frozen=data.get("frozen"),
            explicit_value=decode_bytes(value) if value is not None else None,
        )

    @property
    def path(self) -> str:
        """Chave composta estável usada como contexto da derivação."""
        if self.group is None:
            return self.name
        return f"{self.group}/{self.name}"

    @property
    def is_explicit(self) -> bool:
        return self.explicit_value is not None

    def value(self, hasher: Hasher) -> bytes:
        """Retorna o valor explícito ou deriva pelo hasher."""
        if self.explicit_value is not None:
            return self.explicit_value
        return hasher.derive(self.path, self.version, self.length)

    def rotate(self) -> Self:
        """Incrementa a versão, exceto se congelada. Retorna a própria credencial."""
        if not self.frozen:
            self.version += 1
        return self

    def pin(self, hasher: Hasher) -> Self:
        """Materializa o valor derivado atual como valor explícito.

        Usado antes de trocar o hasher para que credenciais congeladas
        mantenham o valor.
        """
        if self.explicit_value is None:
            self.explicit_value = hasher.derive(self.path, self.version, self.length)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Serializa metadados; o valor só é incluído quando explícito."""
        return {
            "length": self.length,
            "version": self.version,
            "frozen": self.frozen,
            "value": encode_bytes(self.explicit_value) if self.explicit_value is not None else None,
        }
