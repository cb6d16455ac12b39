"""CredentialCollection - coleção hierárquica de credenciais com rotação."""

import gc
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Self, Tuple

from .config import AddOptions, CollectionConfig
from .credential import Credential
from .errors import (
    CredentialNotFound,
    FileNotReadable,
    GroupNotFound,
    InvalidPathArity,
    ShapeConflict,
)
from .hasher import Hasher
from .utils import locked_file, read_file_bytes

SCHEMA_VERSION = 1
PATH_SEPARATOR = "/"


class CredentialGroup:
    """Namespace de credenciais sob uma chave de topo."""

    def __init__(self, name: str, credentials: Optional[Dict[str, Credential]] = None) -> None:
        self.name = name
        self._credentials: Dict[str, Credential] = dict(credentials or {})

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Mapping[str, Any]]) -> Self:
        return cls(
            name,
            {key: Credential.from_dict(key, entry, group=name) for key, entry in data.items()},
        )

    def get(self, name: str) -> Optional[Credential]:
        return self._credentials.get(name)

    def __getitem__(self, name: str) -> Optional[Credential]:
        return self._credentials.get(name)

    def set(self, credential: Credential) -> None:
        self._credentials[credential.name] = credential

    def pop(self, name: str) -> Optional[Credential]:
        return self._credentials.pop(name, None)

    def items(self):
        return self._credentials.items()

    def values(self):
        return self._credentials.values()

    def rotate(self) -> Self:
        """Rotaciona todas as credenciais não congeladas do grupo."""
        for credential in self._credentials.values():
            credential.rotate()
        return self

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {key: credential.to_dict() for key, credential in self._credentials.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._credentials

    def __iter__(self) -> Iterator[str]:
        return iter(self._credentials)

    def __len__(self) -> int:
        return len(self._credentials)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CredentialGroup):
            return NotImplemented
        return self.name == other.name and self._credentials == other._credentials

    def __repr__(self) -> str:
        return f"CredentialGroup(name={self.name!r}, credentials={sorted(self._credentials)!r})"


Entry = Credential | CredentialGroup


def _is_group_entry(entry: Mapping[str, Any]) -> bool:
    # Credencial serializada só tem valores escalares; grupo tem mapeamentos
    return not entry or any(isinstance(value, Mapping) for value in entry.values())


class CredentialCollection:
    """Coleção de credenciais derivadas de um hasher com rotação versionada.

    Esta classe fornece:
    - Namespace de dois níveis: credenciais simples ("name") ou em grupo ("group", "name")
    - Derivação determinística sob demanda via Hasher
    - Segredos explícitos (inclusive importados de arquivo), congelados por padrão
    - Rotação por credencial, por grupo, global e do hasher
    - Serialização para dicionário e arquivo JSON

    Não é thread-safe: o acesso concorrente a uma instância deve ser
    serializado pelo chamador.

    Attributes:
        hasher: Hasher atual
        schema_version: Versão do formato serializado
        config: Configuração da coleção
    """

    def __init__(
        self,
        hasher: Optional[Hasher | Mapping[str, Any]] = None,
        credentials: Optional[Mapping[str, Mapping[str, Any]]] = None,
        schema_version: int = SCHEMA_VERSION,
        config: Optional[CollectionConfig] = None,
        file_reader: Optional[Callable[[str], bytes]] = None,
    ):
        """Inicializa a coleção a partir de partes serializadas.

        Args:
            hasher: Hasher pronto ou configuração de to_config(). None gera um novo
            credentials: Mapa de credenciais no formato de to_dict()
            schema_version: Versão do formato (padrão: 1)
            config: Configuração da coleção
            file_reader: Leitor usado por add_from_file (padrão: leitura de disco)
        """
        self.config = config or CollectionConfig()
        self._logger = self.config.logger or logging.getLogger(__name__)
        self._file_reader = file_reader or read_file_bytes

        if not isinstance(schema_version, int) or isinstance(schema_version, bool):
            raise ValueError(f"schema_version deve ser inteiro, recebido: {schema_version!r}")
        self.schema_version = schema_version

        if hasher is None:
            self.hasher = Hasher.create(self.config.hasher_variant, **self.config.hasher_params)
        elif isinstance(hasher, Hasher):
            self.hasher = hasher
        else:
            self.hasher = Hasher.from_config(hasher)

        self._namespace: Dict[str, Entry] = {}
        for key, entry in (credentials or {}).items():
            if _is_group_entry(entry):
                self._namespace[key] = CredentialGroup.from_dict(key, entry)
            else:
                self._namespace[key] = Credential.from_dict(key, entry)

    @classmethod
    def create(cls, config: Optional[CollectionConfig] = None) -> Self:
        """Cria coleção vazia com hasher aleatório."""
        return cls(config=config)

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        config: Optional[CollectionConfig] = None,
        file_reader: Optional[Callable[[str], bytes]] = None,
    ) -> Self:
        """Reconstrói a coleção a partir de to_dict()."""
        return cls(
            hasher=data.get("hasher"),
            credentials=data.get("credentials"),
            schema_version=data.get("schema_version", SCHEMA_VERSION),
            config=config,
            file_reader=file_reader,
        )

    @classmethod
    def from_file(cls, filename: str, config: Optional[CollectionConfig] = None) -> Self:
        """Carrega a coleção de um arquivo JSON gravado por to_file().

        Raises:
            FileNotFoundError: Se o arquivo não existir
            ValueError: Se o conteúdo não for JSON válido
        """
        path = Path(filename)
        if not path.exists():
            raise FileNotFoundError(f"Arquivo de credenciais não encontrado: {filename}")

        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

        return cls.from_dict(data, config=config)

    # Caminhos

    @staticmethod
    def _split_path(path: Tuple[str, ...]) -> Tuple[Optional[str], str]:
        if len(path) == 1:
            return None, path[0]
        if len(path) == 2:
            return path[0], path[1]
        raise InvalidPathArity(
            f"Caminho deve ter 1 ou 2 segmentos (nome ou grupo e nome), recebido: {len(path)}"
        )

    @staticmethod
    def _check_segments(group: Optional[str], name: str) -> None:
        # "/" separa grupo e nome no contexto da derivação
        for segment in (group, name):
            if segment is not None and PATH_SEPARATOR in segment:
                raise ValueError(
                    f"Segmento de caminho não pode conter '{PATH_SEPARATOR}': {segment!r}"
                )

    def _find(self, group: Optional[str], name: str) -> Optional[Credential]:
        if group is None:
            entry = self._namespace.get(name)
            return entry if isinstance(entry, Credential) else None

        entry = self._namespace.get(group)
        if not isinstance(entry, CredentialGroup):
            return None
        return entry.get(name)

    def _check_shape(self, group: Optional[str], name: str) -> None:
        if group is None:
            if isinstance(self._namespace.get(name), CredentialGroup):
                raise ShapeConflict(f"'{name}' já existe como grupo")
        elif isinstance(self._namespace.get(group), Credential):
            raise ShapeConflict(f"'{group}' já existe como credencial simples")

    # Criação

    def add(self, *path: str, options: Optional[AddOptions] = None, **kwargs: Any) -> Credential:
        """Adiciona uma credencial em ``name`` ou ``group, name``.

        Sem force, uma credencial existente é devolvida inalterada. Com
        force=True, ela é substituída por completo e o histórico de versões
        é descartado.

        Args:
            *path: Nome, ou grupo e nome
            options: Opções de criação
            **kwargs: Alternativa a options (value, length, frozen, force)

        Returns:
            Credential: Credencial armazenada no caminho

        Raises:
            InvalidPathArity: Se o caminho não tiver 1 ou 2 segmentos
            ShapeConflict: Se a chave de topo já existir com o outro formato
            ValueError: Se grupo ou nome contiver "/"

        Examples:
            >>> collection.add("db", "password", length=32)
            >>> collection.add("api_token", value="imported", force=True)
        """
        if options is None:
            options = AddOptions(**kwargs)
        elif kwargs:
            raise TypeError("Informe options ou argumentos nomeados, não ambos")

        group, name = self._split_path(path)
        self._check_segments(group, name)
        self._check_shape(group, name)

        existing = self._find(group, name)
        if existing is not None and not options.force:
            return existing

        credential = Credential(
            name=name,
            group=group,
            length=options.length if options.length is not None else self.config.default_length,
            frozen=options.frozen,
            explicit_value=options.value,
        )

        if group is None:
            self._namespace[name] = credential
        else:
            self._namespace.setdefault(group, CredentialGroup(group)).set(credential)

        self._logger.debug(f"Credencial adicionada: {credential.path}")
        self._audit(
            "add",
            {
                "path": credential.path,
                "frozen": credential.frozen,
                "explicit": credential.is_explicit,
                "replaced": existing is not None,
            },
        )
        return credential

    def add_from_file(self, file_path: str, *path: str, force: bool = False) -> Credential:
        """Adiciona credencial congelada com o conteúdo de um arquivo.

        Args:
            file_path: Caminho do arquivo com o segredo
            *path: Nome, ou grupo e nome
            force: Substitui credencial existente

        Raises:
            FileNotReadable: Se o arquivo não puder ser lido (coleção inalterada)
            InvalidPathArity: Se o caminho não tiver 1 ou 2 segmentos
        """
        self._check_segments(*self._split_path(path))

        try:
            contents = self._file_reader(file_path)
        except OSError as exc:
            raise FileNotReadable(f"Não foi possível ler o arquivo: {file_path}") from exc

        credential = self.add(*path, options=AddOptions(value=contents, frozen=True, force=force))
        self._audit("add_from_file", {"path": credential.path, "file": str(file_path)})
        return credential

    # Consulta

    def get(self, *path: str) -> bytes:
        """Retorna o valor da credencial.

        Raises:
            InvalidPathArity: Se o caminho não tiver 1 ou 2 segmentos
            GroupNotFound: Se o grupo não existir
            CredentialNotFound: Se a credencial não existir
        """
        group, name = self._split_path(path)

        if group is not None and not isinstance(self._namespace.get(group), CredentialGroup):
            raise GroupNotFound(f"Grupo '{group}' não encontrado")

        credential = self._find(group, name)
        if credential is None:
            where = f"{group}/{name}" if group is not None else name
            raise CredentialNotFound(f"Credencial '{where}' não encontrada")

        return credential.value(self.hasher)

    def exist(self, *path: str) -> bool:
        """Indica se a credencial existe. Nunca levanta erro para chaves ausentes."""
        group, name = self._split_path(path)
        return self._find(group, name) is not None

    def __contains__(self, key: object) -> bool:
        path = key if isinstance(key, tuple) else (key,)
        return self.exist(*path)

    def __getitem__(self, key: str | Tuple[str, ...]) -> Optional[Entry]:
        """Acesso a metadados: collection["name"], collection["group"] ou collection["group", "name"].

        Retorna None para chaves ausentes.
        """
        path = key if isinstance(key, tuple) else (key,)
        group, name = self._split_path(path)
        if group is None:
            return self._namespace.get(name)
        return self._find(group, name)

    def credentials(self) -> Iterator[Credential]:
        """Itera sobre todas as credenciais, simples e em grupos."""
        for entry in self._namespace.values():
            if isinstance(entry, CredentialGroup):
                yield from entry.values()
            else:
                yield entry

    def keys(self) -> List[str]:
        """Chaves de topo (credenciais simples e grupos)."""
        return list(self._namespace)

    def __len__(self) -> int:
        return sum(1 for _ in self.credentials())

    # Remoção

    def remove(self, *path: str) -> Optional[Entry]:
        """Remove e retorna a entrada no caminho, ou None se ausente.

        Com um único segmento que nomeia um grupo, o grupo inteiro é removido.
        """
        group, name = self._split_path(path)

        if group is None:
            removed = self._namespace.pop(name, None)
        else:
            entry = self._namespace.get(group)
            removed = entry.pop(name) if isinstance(entry, CredentialGroup) else None

        if removed is not None:
            where = f"{group}/{name}" if group is not None else name
            self._logger.debug(f"Credencial removida: {where}")
            self._audit("remove", {"path": where})

        return removed

    # Rotação

    def rotate(self, *path: str) -> Optional[Entry]:
        """Rotaciona uma credencial, ou todas de um grupo.

        Returns:
            A credencial (ou grupo) rotacionada, ou None se ausente
        """
        group, name = self._split_path(path)

        if group is None:
            entry = self._namespace.get(name)
        else:
            entry = self._find(group, name)

        if entry is None:
            return None

        members = entry.values() if isinstance(entry, CredentialGroup) else [entry]
        before = sum(credential.version for credential in members)
        entry.rotate()
        rotated = sum(credential.version for credential in members) - before

        # Credenciais congeladas não geram log nem auditoria
        if rotated:
            where = f"{group}/{name}" if group is not None else name
            self._logger.debug(f"Rotação aplicada em: {where}")
            self._audit("rotate", {"path": where, "rotated": rotated})
        return entry

    def rotate_credentials(self) -> None:
        """Rotaciona todas as credenciais não congeladas, mantendo o hasher."""
        rotated = 0
        for credential in self.credentials():
            if not credential.frozen:
                credential.rotate()
                rotated += 1

        self._audit("rotate_credentials", {"rotated": rotated})
        self._logger.info(f"Rotação de credenciais completa: {rotated} rotacionadas")

    def rotate_hasher(self) -> None:
        """Troca o hasher por um novo (mesma variante) e rotaciona as credenciais.

        Credenciais congeladas derivadas têm o valor atual fixado antes da
        troca, preservando valor e versão.
        """
        old_hasher = self.hasher
        for credential in self.credentials():
            if credential.frozen:
                credential.pin(old_hasher)

        self.hasher = old_hasher.rotated()
        self._audit("rotate_hasher", {"variant": self.hasher.variant})
        self._logger.info(f"Hasher rotacionado (variante: {self.hasher.variant})")

        self.rotate_credentials()

    # Serialização

    def to_dict(self) -> Dict[str, Any]:
        """Serializa hasher, metadados das credenciais e versão do formato."""
        return {
            "hasher": self.hasher.to_config(),
            "credentials": {key: entry.to_dict() for key, entry in self._namespace.items()},
            "schema_version": self.schema_version,
        }

    def to_file(self, filename: str) -> None:
        """Persiste a coleção em JSON com lock exclusivo e permissão 0600.

        Usa lock de arquivo de melhor esforço; não é garantido em todos os sistemas.
        """
        payload = json.dumps(self.to_dict(), indent=2, sort_keys=True)

        with locked_file(Path(filename)) as f:
            f.seek(0)
            f.truncate()
            f.write(payload + "\n")

        self._logger.info(f"Credenciais persistidas em: {filename}")

    def _audit(self, event: str, metadata: dict) -> None:
        """Registra evento de auditoria se callback configurado.

        Args:
            event: Nome do evento (e.g., "add", "remove", "rotate_hasher")
            metadata: Metadados do evento (nunca contém valores)
        """
        if self.config.audit_callback:
            try:
                self.config.audit_callback(event, metadata)
            except Exception as e:
                self._logger.warning(f"Erro no callback de auditoria: {e}")

    def cleanup(self) -> None:
        """Zera o segredo mestre do hasher em memória.

        Segurança de melhor esforço: o coletor de lixo do Python ainda pode
        manter cópias. Após a chamada, a coleção não deve mais ser usada.
        """
        self.hasher.cleanup()
        gc.collect()

        self._logger.info("Segredo do hasher removido da memória")
