"""Exemplo básico de uso do CredentialCollection."""

import logging

from veil_secrets import CollectionConfig, CredentialCollection, CredentialNotFound

# Configurar logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    """Demonstra uso básico do CredentialCollection."""

    print("\n=== veil-secrets - Exemplo Básico ===\n")

    # 1. Criar coleção com hasher aleatório
    print("1. Criando coleção...")
    config = CollectionConfig(default_length=32, logger=logger)
    collection = CredentialCollection.create(config)
    print(f"   Variante do hasher: {collection.hasher.variant}")

    # 2. Credenciais derivadas (não armazenadas, apenas metadados)
    print("\n2. Adicionando credenciais derivadas...")
    collection.add("postgresql", "password", length=20)
    collection.add("rabbitmq", "password")
    collection.add("session_secret")
    for credential in collection.credentials():
        print(f"   ✓ {credential.path} (length={credential.length})")

    # 3. Credencial explícita (congelada por padrão)
    print("\n3. Adicionando credencial explícita...")
    token = collection.add("external", "api_token", value="sk-1234567890")
    print(f"   ✓ {token.path} congelada: {token.frozen}")

    # 4. Leitura de valores
    print("\n4. Lendo valores...")
    password = collection.get("postgresql", "password")
    print(f"   postgresql/password: {password.hex()[:16]}... ({len(password)} bytes)")
    print(f"   external/api_token: {collection.get('external', 'api_token').decode()}")

    # 5. Consultas seguras
    print("\n5. Consultas que não levantam erro...")
    print(f"   exist('missing'): {collection.exist('missing')}")
    print(f"   collection['missing']: {collection['missing']}")

    try:
        collection.get("missing")
    except CredentialNotFound as e:
        print(f"   get('missing') -> {type(e).__name__}: {e}")

    # 6. Estrutura serializada (sem valores derivados)
    print("\n6. Estrutura serializada:")
    for key, entry in collection.to_dict()["credentials"].items():
        print(f"   {key}: {entry}")

    # 7. Limpar material sensível
    print("\n7. Limpando segredo do hasher da memória...")
    collection.cleanup()
    print("   ✓ Limpeza de segurança concluída")

    print("\n=== Fim do exemplo ===\n")


if __name__ == "__main__":
    main()
