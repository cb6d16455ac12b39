"""Hierarquia de erros do cofre de credenciais."""


class VeilError(Exception):
    """Erro base do cofre de credenciais."""

    pass


class CredentialNotFound(VeilError):
    """Credencial não encontrada no caminho informado."""

    pass


class GroupNotFound(VeilError):
    """Grupo esperado não existe na coleção."""

    pass


class UnknownHasherVariant(VeilError):
    """Variante de hasher não registrada."""

    pass


class FileNotReadable(VeilError):
    """Falha de leitura ao importar segredo de arquivo."""

    pass


class InvalidPathArity(VeilError, TypeError):
    """Caminho com número de segmentos diferente de 1 ou 2."""

    pass


class ShapeConflict(VeilError):
    """Chave de topo já existe com o formato oposto (simples vs grupo)."""

    pass
