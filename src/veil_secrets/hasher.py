"""Hashers - derivação determinística de segredos a partir de um segredo mestre.

Cada variante combina o segredo mestre, o salt e um contexto por chamada
(caminho da credencial + versão) em uma função unidirecional do pacote
``cryptography``. Variantes ficam registradas em ``HASHER_VARIANTS`` no
momento da importação; para adicionar uma nova basta subclassificar
``Hasher`` e decorar com ``register_variant``.
"""

import os
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Mapping, Optional, Self, Type

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from .errors import UnknownHasherVariant
from .utils import decode_bytes, encode_bytes

DEFAULT_VARIANT = "PBKDF2"

HASHER_VARIANTS: Dict[str, Type["Hasher"]] = {}


def register_variant(cls: Type["Hasher"]) -> Type["Hasher"]:
    """Registra uma variante de hasher pelo seu identificador."""
    HASHER_VARIANTS[cls.variant] = cls
    return cls


def _as_bytes(value: bytes | bytearray | str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


class Hasher(ABC):
    """Capacidade de derivação unidirecional com configuração serializável.

    NOTA DE SEGURANÇA: o segredo mestre é mantido em um bytearray para que
    possa ser zerado via cleanup(). Em Python, isto é apenas segurança de
    melhor esforço.

    Attributes:
        variant: Identificador da variante (e.g., "PBKDF2")
        salt: Salt da derivação
    """

    variant: ClassVar[str]
    SECRET_SIZE: ClassVar[int] = 32
    SALT_SIZE: ClassVar[int] = 16

    def __init__(
        self,
        secret: Optional[bytes | str] = None,
        salt: Optional[bytes | str] = None,
    ) -> None:
        if secret is None:
            secret = os.urandom(self.SECRET_SIZE)
        if salt is None:
            salt = os.urandom(self.SALT_SIZE)
        self._secret = bytearray(_as_bytes(secret))
        self.salt = _as_bytes(salt)

    @classmethod
    def create(
        cls,
        variant: str = DEFAULT_VARIANT,
        secret: Optional[bytes | str] = None,
        salt: Optional[bytes | str] = None,
        **params: Any,
    ) -> "Hasher":
        """Cria um hasher da variante informada.

        Segredo e salt ausentes são gerados com os.urandom.

        Args:
            variant: Identificador registrado da variante
            secret: Segredo mestre (bytes ou str UTF-8)
            salt: Salt (bytes ou str UTF-8)
            **params: Parâmetros específicos da variante

        Raises:
            UnknownHasherVariant: Se a variante não estiver registrada
        """
        hasher_cls = HASHER_VARIANTS.get(variant)
        if hasher_cls is None:
            raise UnknownHasherVariant(
                f"Variante de hasher '{variant}' desconhecida. "
                f"Variantes disponíveis: {sorted(HASHER_VARIANTS)}"
            )
        return hasher_cls(secret=secret, salt=salt, **params)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "Hasher":
        """Reconstrói um hasher a partir de to_config().

        Segredo e salt são aceitos em base64 URL-safe ou como bytes.

        Raises:
            ValueError: Se faltar 'variant', 'secret' ou 'salt'
            UnknownHasherVariant: Se a variante não estiver registrada
        """
        params = dict(config)
        if not {"variant", "secret", "salt"} <= params.keys():
            raise ValueError("Configuração do hasher deve conter 'variant', 'secret' e 'salt'")

        variant = params.pop("variant")
        secret = decode_bytes(params.pop("secret"))
        salt = decode_bytes(params.pop("salt"))
        return cls.create(variant, secret=secret, salt=salt, **params)

    @property
    def secret(self) -> bytes:
        return bytes(self._secret)

    def params(self) -> Dict[str, Any]:
        """Parâmetros da variante que entram na configuração serializada."""
        return {}

    def to_config(self) -> Dict[str, Any]:
        """Serializa a configuração (segredo e salt em base64)."""
        config: Dict[str, Any] = {
            "variant": self.variant,
            "secret": encode_bytes(self._secret),
            "salt": encode_bytes(self.salt),
        }
        config.update(self.params())
        return config

    def rotated(self) -> Self:
        """Novo hasher da mesma variante e parâmetros, com segredo e salt novos."""
        return type(self)(**self.params())

    def derive(self, context: str, version: int, length: int) -> bytes:
        """Deriva ``length`` bytes pseudoaleatórios para (context, version).

        Args:
            context: Contexto estável (caminho da credencial)
            version: Versão da credencial (>= 0)
            length: Tamanho exato da saída em bytes

        Returns:
            bytes: Saída determinística para a configuração atual

        Raises:
            ValueError: Se length <= 0 ou version < 0
        """
        if length <= 0:
            raise ValueError(f"Tamanho da derivação deve ser positivo, recebido: {length}")
        if version < 0:
            raise ValueError(f"Versão não pode ser negativa, recebido: {version}")
        return self._derive(bytes(self._secret), self._info(context, version), length)

    @staticmethod
    def _info(context: str, version: int) -> bytes:
        # Prefixo de tamanho evita ambiguidade entre contexto e versão
        ctx = context.encode("utf-8")
        return len(ctx).to_bytes(4, "big") + ctx + version.to_bytes(8, "big")

    @abstractmethod
    def _derive(self, secret: bytes, info: bytes, length: int) -> bytes:
        """Aplica a função unidirecional da variante."""

    def cleanup(self) -> None:
        """Zera o segredo mestre em memória. O hasher não deve ser usado depois."""
        for i in range(len(self._secret)):
            self._secret[i] = 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Hasher):
            return NotImplemented
        return self.to_config() == other.to_config()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(variant={self.variant!r}, params={self.params()!r})"


@register_variant
class PBKDF2Hasher(Hasher):
    """PBKDF2-HMAC-SHA512, propositalmente lento."""

    variant = "PBKDF2"

    def __init__(
        self,
        secret: Optional[bytes | str] = None,
        salt: Optional[bytes | str] = None,
        iterations: int = 100_000,
    ) -> None:
        super().__init__(secret, salt)
        if iterations <= 0:
            raise ValueError(f"Número de iterações deve ser positivo, recebido: {iterations}")
        self.iterations = iterations

    def params(self) -> Dict[str, Any]:
        return {"iterations": self.iterations}

    def _derive(self, secret: bytes, info: bytes, length: int) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA512(),
            length=length,
            salt=self.salt + info,
            iterations=self.iterations,
        )
        return kdf.derive(secret)


@register_variant
class ScryptHasher(Hasher):
    """Scrypt, custoso em memória."""

    variant = "Scrypt"

    def __init__(
        self,
        secret: Optional[bytes | str] = None,
        salt: Optional[bytes | str] = None,
        n: int = 2**14,
        r: int = 8,
        p: int = 1,
    ) -> None:
        super().__init__(secret, salt)
        self.n = n
        self.r = r
        self.p = p

    def params(self) -> Dict[str, Any]:
        return {"n": self.n, "r": self.r, "p": self.p}

    def _derive(self, secret: bytes, info: bytes, length: int) -> bytes:
        kdf = Scrypt(salt=self.salt + info, length=length, n=self.n, r=self.r, p=self.p)
        return kdf.derive(secret)


@register_variant
class HKDFHasher(Hasher):
    """HKDF-SHA512. Rápido; indicado quando o segredo mestre já tem alta entropia."""

    variant = "HKDF"

    # Limite do HKDF: 255 blocos do digest
    MAX_LENGTH: ClassVar[int] = 255 * 64

    def _derive(self, secret: bytes, info: bytes, length: int) -> bytes:
        if length > self.MAX_LENGTH:
            raise ValueError(
                f"HKDF suporta no máximo {self.MAX_LENGTH} bytes, solicitado: {length}"
            )
        kdf = HKDF(algorithm=hashes.SHA512(), length=length, salt=self.salt, info=info)
        return kdf.derive(secret)
