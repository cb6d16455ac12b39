"""veil-secrets - Cofre hierárquico de credenciais derivadas.

Este pacote fornece:
- Derivação determinística de segredos a partir de um segredo mestre
- Hashers plugáveis (PBKDF2, Scrypt, HKDF)
- Credenciais explícitas e importadas de arquivo, congeladas por padrão
- Rotação por credencial, por grupo, global e do hasher
- Serialização para dicionário e arquivo JSON
"""

from .collection import CredentialCollection, CredentialGroup
from .config import AddOptions, CollectionConfig
from .credential import DEFAULT_LENGTH, Credential
from .errors import (
    CredentialNotFound,
    FileNotReadable,
    GroupNotFound,
    InvalidPathArity,
    ShapeConflict,
    UnknownHasherVariant,
    VeilError,
)
from .hasher import HASHER_VARIANTS, Hasher, HKDFHasher, PBKDF2Hasher, ScryptHasher

__version__ = "0.1.0"

__all__ = [
    # Classes principais
    "CredentialCollection",
    "CredentialGroup",
    "Credential",
    # Hashers
    "Hasher",
    "PBKDF2Hasher",
    "ScryptHasher",
    "HKDFHasher",
    "HASHER_VARIANTS",
    # Configuração
    "CollectionConfig",
    "AddOptions",
    "DEFAULT_LENGTH",
    # Erros
    "VeilError",
    "CredentialNotFound",
    "GroupNotFound",
    "UnknownHasherVariant",
    "FileNotReadable",
    "InvalidPathArity",
    "ShapeConflict",
]
