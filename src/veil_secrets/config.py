"""Configurações e dataclasses para o CredentialCollection."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Self

from .credential import DEFAULT_LENGTH
from .errors import UnknownHasherVariant
from .hasher import DEFAULT_VARIANT, HASHER_VARIANTS
from .utils import parse_env_file


@dataclass(frozen=True)
class AddOptions:
    """Opções de CredentialCollection.add().

    Attributes:
        value: Valor explícito (str ou bytes). None deriva o valor pelo hasher
        length: Tamanho da credencial. None usa o padrão da coleção
        frozen: Congelamento. None significa "congelada se houver valor explícito"
        force: Substitui a credencial existente, descartando o histórico de versões
    """

    value: Optional[bytes | str] = None
    length: Optional[int] = None
    frozen: Optional[bool] = None
    force: bool = False


@dataclass
class CollectionConfig:
    """Configuração do CredentialCollection.

    Attributes:
        default_length: Tamanho padrão de novas credenciais (padrão: 128)
        hasher_variant: Variante usada para hashers novos (padrão: PBKDF2)
        hasher_params: Parâmetros da variante (e.g., {"iterations": 100_000})
        audit_callback: Callback opcional para auditoria de eventos
        logger: Logger opcional para mensagens (usa logging padrão se None)
    """

    default_length: int = DEFAULT_LENGTH
    hasher_variant: str = DEFAULT_VARIANT
    hasher_params: Dict[str, Any] = field(default_factory=dict)
    audit_callback: Optional[Callable] = None
    logger: Optional[Any] = None  # logging.Logger

    def __post_init__(self) -> None:
        """Valida configuração após inicialização."""
        if (
            not isinstance(self.default_length, int)
            or isinstance(self.default_length, bool)
            or self.default_length <= 0
        ):
            raise ValueError(
                f"Tamanho padrão deve ser inteiro positivo, recebido: {self.default_length!r}"
            )

        if self.hasher_variant not in HASHER_VARIANTS:
            raise UnknownHasherVariant(
                f"Variante de hasher '{self.hasher_variant}' desconhecida. "
                f"Variantes disponíveis: {sorted(HASHER_VARIANTS)}"
            )

    @classmethod
    def from_environment(cls, prefix: str = "VEIL", **kwargs: Any) -> Self:
        """Cria configuração a partir de variáveis de ambiente.

        Formato esperado (todas opcionais):
            VEIL_DEFAULT_LENGTH=64
            VEIL_HASHER_VARIANT=PBKDF2
            VEIL_KDF_ITERATIONS=200000

        Args:
            prefix: Prefixo das variáveis (padrão: VEIL)
            **kwargs: Argumentos adicionais para CollectionConfig

        Raises:
            ValueError: Se algum valor numérico for inválido
        """
        return cls._from_mapping(os.environ, prefix=prefix, **kwargs)

    @classmethod
    def from_file(cls, filename: str, prefix: str = "VEIL", **kwargs: Any) -> Self:
        """Cria configuração a partir de um arquivo .env.

        Args:
            filename: Caminho do arquivo .env
            prefix: Prefixo das variáveis (padrão: VEIL)
            **kwargs: Argumentos adicionais para CollectionConfig

        Raises:
            FileNotFoundError: Se o arquivo não existir
            ValueError: Se algum valor numérico for inválido
        """
        env_path = Path(filename)
        if not env_path.exists():
            raise FileNotFoundError(f"Arquivo .env não encontrado: {filename}")

        return cls._from_mapping(parse_env_file(env_path), prefix=prefix, **kwargs)

    @classmethod
    def _from_mapping(cls, mapping: Mapping[str, str], prefix: str = "VEIL", **kwargs: Any) -> Self:
        """Cria configuração a partir de um mapeamento de variáveis."""
        options: Dict[str, Any] = {}

        length = mapping.get(f"{prefix}_DEFAULT_LENGTH")
        if length:
            options["default_length"] = _parse_int(f"{prefix}_DEFAULT_LENGTH", length)

        variant = mapping.get(f"{prefix}_HASHER_VARIANT")
        if variant:
            # Remover aspas (problema comum com dotenv)
            options["hasher_variant"] = variant.strip("\"'")

        # Iterações só se aplicam ao PBKDF2
        iterations = mapping.get(f"{prefix}_KDF_ITERATIONS")
        if iterations and options.get("hasher_variant", DEFAULT_VARIANT) == "PBKDF2":
            options["hasher_params"] = {
                "iterations": _parse_int(f"{prefix}_KDF_ITERATIONS", iterations)
            }

        options.update(kwargs)
        return cls(**options)


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip("\"'"))
    except ValueError as exc:
        raise ValueError(f"Variável {name} deve ser um inteiro, recebido: {raw!r}") from exc
